"""Static bank-code to BIC table for Dutch IBANs.

Dutch IBANs embed a 4-letter bank code right after the country code and
check digits (``NL91ABNA0417164300`` -> ``ABNA``). The table maps that code
to the institution's BIC. Data as published by the Dutch Payments
Association, July 2012.

The mapping is read-only: it is built once at import time and exposed as a
``MappingProxyType``, so it can be shared freely.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Final

BANK_CODE_TO_BIC: Final[Mapping[str, str]] = MappingProxyType(
    {
        "ABNA": "ABNANL2A",
        "ARBN": "ARBNNL22",
        "AEGO": "AEGONL2U",
        "AKBK": "AKBKNL2R",
        "ATBA": "ATBANL2A",
        "ANDL": "ANDLNL2A",
        "ARSN": "ARSNNL21",
        "ASNB": "ASNBNL21",
        "ASRB": "ASRBNL2R",
        "BKMG": "BKMGNL2A",
        "BOFA": "BOFANLNX",
        "BOTK": "BOTKGB2L",
        "BCDM": "BCDMNL22",
        "BICK": "BICKNL2A",
        "BNPA": "BNPANL2A",
        "BOUW": "BOUWNL22",
        "CITC": "CITCNL2A",
        "CITI": "CITINL2X",
        "COBA": "COBANL2X",
        "FBHL": "FBHLNL2A",
        "FLOR": "FLORNL2A",
        "DLBK": "DLBKNL2A",
        "DHBN": "DHBNNL2R",
        "DEUT": "DEUTNL2N",
        "AOLB": "AOLBNL2A",
        "BGCC": "BGCCNL2A",
        "FVLB": "FVLBNL22",
        "RABO": "RABONL2U",
        "FTSB": "FTSBNL2R",
        "FRBK": "FRBKNL2L",
        "UGBI": "UGBINL2A",
        "ARTE": "ARTENL2A",
        "HSBC": "HSBCNL2A",
        "INGB": "INGBNL2A",
        "BBRU": "BBRUNL2X",
        "INSI": "INSINL2A",
        "INKB": "INKBNL21",
        "ICSV": "ICSVNL2D",
        "BCIT": "BCITNL2A",
        "ISBK": "ISBKNL2A",
        "KASA": "KASANL2A",
        "KRED": "KREDNL2X",
        "KOEX": "KOEXNL2A",
        "LPLN": "LPLNNL2A",
        "OVBN": "OVBNNL22",
        "LOYD": "LOYDNL2A",
        "LOCY": "LOCYNL2A",
        "MHCB": "MHCBNL2A",
        "NNBA": "NNBANL2G",
        "NWAB": "NWABNL2G",
        "DNIB": "DNIBNL2G",
        "BNGH": "BNGHNL2G",
        "RBRB": "RBRBNL21",
        "RGRB": "RGRBNL2R",
        "RBOS": "RBOSNL2A",
        "SNSB": "SNSBNL2A",
        "SOGE": "SOGENL2A",
        "STAL": "STALNL2G",
        "HAND": "HANDNL2A",
        "TEBU": "TEBUNL2A",
        "GILL": "GILLNL2A",
        "TRIO": "TRIONL2U",
        "UBSW": "UBSWNL2A",
        "VPVG": "VPVGNL22",
        "VOWA": "VOWANL21",
        "KABA": "KABANL2A",
    }
)


def lookup_bic(bank_code: str) -> str | None:
    """Return the BIC registered for ``bank_code`` (case-insensitive), or None.

    Example:
        >>> lookup_bic("abna")
        'ABNANL2A'
        >>> lookup_bic("XXXX") is None
        True
    """
    return BANK_CODE_TO_BIC.get(bank_code.strip().upper())


def supported_bank_codes() -> list[str]:
    """Sorted list of bank codes with a known BIC."""
    return sorted(BANK_CODE_TO_BIC)
