from .keys import ActivationState, ActivationStore, generate_key, validate_key

__all__ = ["ActivationState", "ActivationStore", "generate_key", "validate_key"]
