class PhiAccrualError(Exception):
    pass


class ConfigurationError(PhiAccrualError, ValueError):
    pass


class InvalidArgumentError(PhiAccrualError, ValueError):
    pass


class EmptyWindowError(PhiAccrualError, LookupError):
    pass
