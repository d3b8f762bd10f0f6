'''
Password hashing. Lives in common/ so that models, services and the test
factories can share it without importing each other.
'''
from passlib.context import CryptContext

class HashedPassword:
    """bcrypt hashing; hashes made with older settings are flagged for upgrade."""
    pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)

    @classmethod
    def get_hash(cls, password: str) -> str:
        return cls.pwd_context.hash(password)

    @classmethod
    def verify(cls, plain_password: str, hashed_password: str) -> bool:
        return cls.pwd_context.verify(plain_password, hashed_password)

    @classmethod
    def verify_and_update(cls, plain_password: str, hashed_password: str) -> tuple[bool, str | None]:
        """
        Returns (valid, new_hash). new_hash is set only when the password
        matched and the stored hash should be replaced.
        """
        return cls.pwd_context.verify_and_update(plain_password, hashed_password)
