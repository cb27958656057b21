"""
core/errors.py -- Typed exception hierarchy for CredSeal.

Every failure the library can report is a subclass of CredSealError, so a
caller can catch the whole family in one clause or pick out the one it cares
about. MalformedRecord and ParseError also subclass ValueError because they
describe bad input values and existing callers catch ValueError for that.

Layer rule: no imports from api/, auth/, or vault/.
"""


class CredSealError(Exception):
    """Base class for all CredSeal errors."""


class MalformedRecord(CredSealError, ValueError):
    """A credential record does not have the LEFT:DIGEST:RIGHT shape.

    verify_credential() never lets this escape -- it resolves to False.
    CredentialRecord.parse() raises it for callers that need the fields.
    """


class ParseError(CredSealError, ValueError):
    """A value could not be parsed as the requested numeric type."""


class CodecError(CredSealError):
    """Base class for data codec failures."""


class SerializationError(CodecError):
    """The value contains members the canonical encoding cannot represent."""


class DeserializationError(CodecError):
    """The authenticated plaintext is not valid canonical-encoded data."""


class DecryptionError(CodecError):
    """The payload is malformed, tampered with, or the passphrase is wrong.

    These cases are deliberately indistinguishable to the caller.
    """
