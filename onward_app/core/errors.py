# onward_app/core/errors.py


class OnwardError(Exception):
    """Base class for errors raised by the progress engine."""


class InvalidInputError(OnwardError, ValueError):
    """A requested mutation would break a profile invariant; nothing was changed."""


class PersistenceError(OnwardError):
    """The durable write failed and the transaction was rolled back."""


class ProfileExistsError(OnwardError):
    """Onboarding was attempted while a profile record already exists."""


class EntryNotFoundError(OnwardError, LookupError):
    """The journal entry named in a deletion does not exist."""


class ProfileNotFoundError(OnwardError, LookupError):
    """The operation needs a profile and onboarding has not happened yet."""
