"""Supported bank statement formats.

Each BankFormat member pairs a bank-format tag with the normalizer that
reads its files. Supporting a new bank means adding a normalizer module and
a member here.
"""

from enum import Enum

from bookkeep.domain.errors import UnsupportedFormatError, unsupported_bank_type
from bookkeep.formats.base import RowContext, RowNormalizer, Skip, SkipKind
from bookkeep.formats.bpi import BpiNormalizer
from bookkeep.formats.revolut import RevolutNormalizer


class BankFormat(Enum):
    """Closed set of bank formats with a registered normalizer."""

    REVOLUT = ("revolut", "csv", RevolutNormalizer)
    BPI = ("bpi", "xlsx", BpiNormalizer)

    def __init__(self, tag: str, file_extension: str, normalizer_class: type[RowNormalizer]):
        self.tag = tag
        self.file_extension = file_extension
        self.normalizer = normalizer_class()

    @property
    def home_currency(self) -> str:
        return self.normalizer.home_currency

    @classmethod
    def from_tag(cls, tag: str | None) -> "BankFormat":
        """Resolve an account's bank-format tag.

        Raises:
            UnsupportedFormatError: If no normalizer is registered for the tag
        """
        normalized = (tag or "").strip().lower()
        for bank_format in cls:
            if bank_format.tag == normalized:
                return bank_format
        raise UnsupportedFormatError(unsupported_bank_type(tag or ""))


__all__ = [
    "BankFormat",
    "RowContext",
    "RowNormalizer",
    "Skip",
    "SkipKind",
]
