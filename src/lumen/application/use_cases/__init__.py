"""Use cases."""

from lumen.application.use_cases.handle_user_input import (
    HandleUserInputUseCase,
    TurnResult,
)

__all__ = ["HandleUserInputUseCase", "TurnResult"]
