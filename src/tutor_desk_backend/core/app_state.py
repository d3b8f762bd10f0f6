'''
Explicit application state. Each slice has one update function that
returns a new state; nothing is mutated in place.
'''
from typing import Optional
from uuid import UUID

from ..database.db_enums import ThemeMode
from ..models.app_state import AppState, AuthState, NavigationState, NavigationUpdate, ThemeState
from ..models.settings import UserSettings


def initial_state() -> AppState:
    return AppState()


# --- auth slice ---

def update_auth(state: AppState, user_id: Optional[UUID], teacher_id: Optional[UUID], email: Optional[str]) -> AppState:
    return state.model_copy(update={
        "auth": AuthState(user_id=user_id, teacher_id=teacher_id, email=email)
    })


def sign_out(state: AppState) -> AppState:
    """Clears the auth slice and the selection that belonged to the old session."""
    return state.model_copy(update={
        "auth": AuthState(),
        "navigation": NavigationState(),
    })


# --- navigation slice ---

def update_navigation(state: AppState, update: NavigationUpdate) -> AppState:
    changes = update.model_dump(exclude_unset=True)
    if "section" in changes and changes["section"] is None:
        del changes["section"]
    return state.model_copy(update={
        "navigation": state.navigation.model_copy(update=changes)
    })


# --- theme slice ---

def update_theme(state: AppState, mode: Optional[ThemeMode] = None, primary_color: Optional[str] = None) -> AppState:
    changes = {}
    if mode is not None:
        changes["mode"] = mode
    if primary_color is not None:
        changes["primary_color"] = primary_color
    return state.model_copy(update={"theme": state.theme.model_copy(update=changes)})


def toggle_dark_mode(state: AppState) -> AppState:
    mode = ThemeMode.LIGHT if state.theme.mode == ThemeMode.DARK else ThemeMode.DARK
    return update_theme(state, mode=mode)


def state_for_session(user_id: UUID, teacher_id: UUID, email: str, user_settings: UserSettings) -> AppState:
    """Starting state for a signed-in teacher, with the theme taken from their settings."""
    state = update_auth(initial_state(), user_id, teacher_id, email)
    return update_theme(state, user_settings.theme.mode, user_settings.theme.primary_color)
