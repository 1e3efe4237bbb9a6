from .app_state import AppState
