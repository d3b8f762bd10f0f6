from typing import Optional

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKeyConstraint, Index, Numeric, PrimaryKeyConstraint, String, Text, Time, UniqueConstraint, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
import datetime
import decimal
import uuid

# JSONB on Postgres, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), 'postgresql')


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class Base(DeclarativeBase):
    pass


class Users(Base):
    __tablename__ = 'users'
    __table_args__ = (
        PrimaryKeyConstraint('id', name='users_pkey'),
        UniqueConstraint('email', name='users_email_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255))
    password: Mapped[str] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)

    teacher_profile: Mapped[Optional['TeacherProfiles']] = relationship('TeacherProfiles', back_populates='user', uselist=False)


class TeacherProfiles(Base):
    __tablename__ = 'teacher_profiles'
    __table_args__ = (
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='teacher_profiles_user_id_fkey'),
        PrimaryKeyConstraint('id', name='teacher_profiles_pkey'),
        UniqueConstraint('user_id', name='teacher_profiles_user_id_key')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    full_name: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    subject: Mapped[Optional[str]] = mapped_column(Text)
    avatar_url: Mapped[Optional[str]] = mapped_column(Text)

    user: Mapped['Users'] = relationship('Users', back_populates='teacher_profile')
    students: Mapped[list['Students']] = relationship('Students', back_populates='teacher', passive_deletes=True)


class Students(Base):
    __tablename__ = 'students'
    __table_args__ = (
        ForeignKeyConstraint(['teacher_id'], ['teacher_profiles.id'], ondelete='CASCADE', name='students_teacher_id_fkey'),
        PrimaryKeyConstraint('id', name='students_pkey'),
        Index('idx_students_teacher_id', 'teacher_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    full_name: Mapped[str] = mapped_column(Text)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    grade: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(Text)
    parent_name: Mapped[Optional[str]] = mapped_column(Text)
    parent_phone: Mapped[Optional[str]] = mapped_column(Text)

    teacher: Mapped['TeacherProfiles'] = relationship('TeacherProfiles', back_populates='students')
    lessons: Mapped[list['Lessons']] = relationship('Lessons', back_populates='student', passive_deletes=True, order_by='Lessons.start_time')
    payments: Mapped[list['Payments']] = relationship('Payments', back_populates='student', passive_deletes=True)


class Lessons(Base):
    __tablename__ = 'lessons'
    __table_args__ = (
        ForeignKeyConstraint(['student_id'], ['students.id'], name='lessons_student_id_fkey'),
        PrimaryKeyConstraint('id', name='lessons_pkey'),
        Index('idx_lessons_student_id', 'student_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    subject: Mapped[str] = mapped_column(Text)
    # Free text so rows with an unrecognised day still load
    day_of_week: Mapped[str] = mapped_column(Text)
    start_time: Mapped[datetime.time] = mapped_column(Time)
    price_per_hour: Mapped[decimal.Decimal] = mapped_column(Numeric(10, 2))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    status: Mapped[Optional[str]] = mapped_column(String(20))
    postponed_to: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(True))
    postpone_reason: Mapped[Optional[str]] = mapped_column(Text)

    student: Mapped['Students'] = relationship('Students', back_populates='lessons')


class Payments(Base):
    __tablename__ = 'payments'
    __table_args__ = (
        ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE', name='payments_student_id_fkey'),
        PrimaryKeyConstraint('id', name='payments_pkey'),
        Index('idx_payments_student_id', 'student_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    amount: Mapped[decimal.Decimal] = mapped_column(Numeric(10, 2))
    payment_date: Mapped[datetime.date] = mapped_column(Date)
    payment_method: Mapped[str] = mapped_column(String(20))
    status: Mapped[str] = mapped_column(String(20))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    description: Mapped[Optional[str]] = mapped_column(Text)

    student: Mapped['Students'] = relationship('Students', back_populates='payments')


class ScheduleEntries(Base):
    __tablename__ = 'schedule'
    __table_args__ = (
        ForeignKeyConstraint(['teacher_id'], ['teacher_profiles.id'], ondelete='CASCADE', name='schedule_teacher_id_fkey'),
        ForeignKeyConstraint(['student_id'], ['students.id'], ondelete='CASCADE', name='schedule_student_id_fkey'),
        PrimaryKeyConstraint('id', name='schedule_pkey'),
        Index('idx_schedule_teacher_id', 'teacher_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    subject: Mapped[str] = mapped_column(Text)
    day_of_week: Mapped[str] = mapped_column(Text)
    time_slot: Mapped[str] = mapped_column(String(5))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)

    student: Mapped['Students'] = relationship('Students')


class TeacherTimeSlots(Base):
    __tablename__ = 'teacher_time_slots'
    __table_args__ = (
        ForeignKeyConstraint(['teacher_id'], ['teacher_profiles.id'], ondelete='CASCADE', name='teacher_time_slots_teacher_id_fkey'),
        PrimaryKeyConstraint('teacher_id', name='teacher_time_slots_pkey'),
    )

    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    time_slots: Mapped[list] = mapped_column(JSONType, default=list)


class Notifications(Base):
    __tablename__ = 'notifications'
    __table_args__ = (
        ForeignKeyConstraint(['teacher_id'], ['teacher_profiles.id'], ondelete='CASCADE', name='notifications_teacher_id_fkey'),
        ForeignKeyConstraint(['student_id'], ['students.id'], name='notifications_student_id_fkey'),
        ForeignKeyConstraint(['lesson_id'], ['lessons.id'], name='notifications_lesson_id_fkey'),
        PrimaryKeyConstraint('id', name='notifications_pkey'),
        Index('idx_notifications_teacher_created', 'teacher_id', 'created_at')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    student_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    lesson_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    type: Mapped[str] = mapped_column(String(20))
    read: Mapped[bool] = mapped_column(Boolean, default=False)
    sent: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)

    student: Mapped['Students'] = relationship('Students')
    lesson: Mapped['Lessons'] = relationship('Lessons')


class Subjects(Base):
    __tablename__ = 'subjects'
    __table_args__ = (
        ForeignKeyConstraint(['teacher_id'], ['teacher_profiles.id'], ondelete='CASCADE', name='subjects_teacher_id_fkey'),
        PrimaryKeyConstraint('id', name='subjects_pkey'),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    name: Mapped[str] = mapped_column(Text)
    objectives: Mapped[list] = mapped_column(JSONType, default=list)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    description: Mapped[Optional[str]] = mapped_column(Text)

    resources: Mapped[list['LessonResources']] = relationship('LessonResources', back_populates='subject', passive_deletes=True)


class LessonResources(Base):
    __tablename__ = 'lesson_resources'
    __table_args__ = (
        ForeignKeyConstraint(['teacher_id'], ['teacher_profiles.id'], ondelete='CASCADE', name='lesson_resources_teacher_id_fkey'),
        ForeignKeyConstraint(['subject_id'], ['subjects.id'], name='lesson_resources_subject_id_fkey'),
        PrimaryKeyConstraint('id', name='lesson_resources_pkey'),
        Index('idx_lesson_resources_subject_id', 'subject_id')
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    teacher_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    subject_id: Mapped[uuid.UUID] = mapped_column(Uuid)
    title: Mapped[str] = mapped_column(Text)
    tags: Mapped[list] = mapped_column(JSONType, default=list)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
    description: Mapped[Optional[str]] = mapped_column(Text)
    file_url: Mapped[Optional[str]] = mapped_column(Text)
    link_url: Mapped[Optional[str]] = mapped_column(Text)

    subject: Mapped['Subjects'] = relationship('Subjects', back_populates='resources')


class UserSettings(Base):
    __tablename__ = 'user_settings'
    __table_args__ = (
        ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE', name='user_settings_user_id_fkey'),
        PrimaryKeyConstraint('user_id', name='user_settings_pkey'),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    settings: Mapped[dict] = mapped_column(JSONType, default=dict)
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(True), default=utcnow)
