from .fingerprint import fingerprint
from .rate_gate import InMemoryRateGate, LimitPolicy, LimiterClass, RateGate
from .validator import PlausibilityRules, PlausibilityValidator, ValidationResult

__all__ = [
    'fingerprint',
    'InMemoryRateGate',
    'LimitPolicy',
    'LimiterClass',
    'RateGate',
    'PlausibilityRules',
    'PlausibilityValidator',
    'ValidationResult',
]
