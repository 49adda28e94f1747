"""SKU classification and channel canonicalization.

SKU anatomy (refurbished electronics):
    [PREFIX:]PREFIX-TOKENS-...-GRADE     e.g. PA-BLU-64-CA
    ...-INTAKE                           units not yet graded

- prefix   -> category (Phone / Tablet / Laptop / Accessory / Other)
- grade    -> bucket (sellable / failed); -INTAKE -> intake
- family   -> SKU without its grade token, the unit of cross-grade rollup

Every function here is total: unknown prefixes, grades or channels fall
back to permissive defaults and never raise.
"""

from dataclasses import dataclass

BUCKET_SELLABLE = "sellable"
BUCKET_INTAKE = "intake"
BUCKET_FAILED = "failed"

CATEGORY_OTHER = "Other"

# Prefix -> category. Order matters for startswith matching.
CATEGORY_MAP: dict[str, str] = {
    "PA": "Phone",
    "PKA": "Phone",
    "PKO": "Phone",
    "TA": "Tablet",
    "TKA": "Tablet",
    "TKO": "Tablet",
    "LA": "Laptop",
    "LKA": "Laptop",
    "LKO": "Laptop",
    "AA": "Accessory",
    "AKA": "Accessory",
    "AKO": "Accessory",
    "CA": "Accessory",
    "CKA": "Accessory",
    "IA": "Accessory",
    "IKA": "Accessory",
    "HTR": "Accessory",
}

KNOWN_GRADES: tuple[str, ...] = ("CAP1", "CAP", "CA+", "CA", "CAB", "SD-", "SD", "SDB", "XF", "XC")
FAILED_GRADES = frozenset({"XF", "XC"})

INTAKE_GRADE = "INTAKE"
_INTAKE_SUFFIX = "-INTAKE"


@dataclass(frozen=True)
class ParsedSku:
    """Structured classification of a SKU string."""

    prefix: str
    category: str
    grade: str
    bucket: str
    product_family: str


def parse_sku(sku: str) -> ParsedSku:
    """Classify a raw SKU.

    Args:
        sku: Raw SKU string (may be empty).

    Returns:
        ParsedSku. Unknown prefixes map to category "Other", unknown grade
        suffixes leave grade empty and the family equal to the SKU.

    Example:
        >>> parse_sku("PA-BLU-64-CA")
        ParsedSku(prefix='PA', category='Phone', grade='CA', bucket='sellable', product_family='PA-BLU-64')
    """
    if not sku:
        return ParsedSku(
            prefix="",
            category=CATEGORY_OTHER,
            grade="",
            bucket=BUCKET_SELLABLE,
            product_family=sku or "",
        )

    raw = sku.strip()

    if raw.upper().endswith(_INTAKE_SUFFIX):
        base = raw[: -len(_INTAKE_SUFFIX)]
        prefix = _extract_prefix(base)
        return ParsedSku(
            prefix=prefix,
            category=CATEGORY_MAP.get(prefix, CATEGORY_OTHER),
            grade=INTAKE_GRADE,
            bucket=BUCKET_INTAKE,
            product_family=base,
        )

    prefix = _extract_prefix(raw)
    category = CATEGORY_MAP.get(prefix, CATEGORY_OTHER)

    parts = raw.split("-")
    grade = ""
    family = raw
    if len(parts) > 1 and parts[-1].upper() in KNOWN_GRADES:
        grade = parts[-1].upper()
        family = "-".join(parts[:-1])

    bucket = BUCKET_FAILED if grade in FAILED_GRADES else BUCKET_SELLABLE

    return ParsedSku(
        prefix=prefix,
        category=category,
        grade=grade,
        bucket=bucket,
        product_family=family,
    )


def _extract_prefix(sku: str) -> str:
    """Prefix before a colon, else the first hyphen segment (normalized when known)."""
    colon_idx = sku.find(":")
    if colon_idx > 0:
        return sku[:colon_idx]

    first = sku.split("-")[0]
    upper = first.upper()
    for key in CATEGORY_MAP:
        if upper == key or upper.startswith(key):
            return key
    return first


# ============================================================
# Channel canonicalization
# ============================================================

# Raw channel code -> display name ("Website" is resolved by company)
_CHANNEL_MAP: dict[str, str] = {
    "BackMarket": "Back Market",
    "eBayOrder": "eBay",
    "Local_Store": "Wholesale/B2B",
    "Wholesale": "Wholesale/B2B",
    "NewEggdotcom": "NewEgg",
    "FBA": "Amazon FBA",
    "Amazon": "Amazon",
    "Walmart_Marketplace": "Walmart",
    "Tanga": "Tanga",
}

CHANNEL_UNKNOWN = "Unknown"


def map_channel(channel_raw: str, company: str) -> str:
    """Map a raw channel code (plus company for website orders) to a display name.

    Args:
        channel_raw: Channel column from the P&L export.
        company: Company column; disambiguates "Website" orders.

    Returns:
        Canonical channel name; unmapped values pass through, empty -> "Unknown".
    """
    ch = (channel_raw or "").strip()
    co = (company or "").strip().upper()

    if ch == "Website":
        if "REEBELO" in co or "REBELLO" in co:
            return "Rebello"
        if "SWAPPA" in co:
            return "Swappa"
        return "BMP/Asurion"

    return _CHANNEL_MAP.get(ch, ch or CHANNEL_UNKNOWN)


# ============================================================
# Display names reconstructed from SKU tokens
# ============================================================

_MODEL_TOKENS: dict[str, str] = {
    "IPH": "iPhone",
    "IP": "iPhone",
    "IPD": "iPad",
    "IPDM": "iPad Mini",
    "IPDP": "iPad Pro",
    "IPDA": "iPad Air",
    "MBP": "MacBook Pro",
    "MBA": "MacBook Air",
    "MACM": "Mac Mini",
    "GS": "Galaxy S",
    "GN": "Galaxy Note",
    "GP": "Galaxy",
    "APMC": "Apple Watch",
    "AW": "Apple Watch",
}
_MANUFACTURER_TOKENS: dict[str, str] = {
    "APPLE": "Apple",
    "SAMSUNG": "Samsung",
    "GOOGLE": "Google",
    "MOTOROLA": "Motorola",
    "LG": "LG",
}
# Empty value: token is recognised but contributes nothing to the name
_CARRIER_TOKENS: dict[str, str] = {
    "UN": "Unlocked",
    "VZ": "Verizon",
    "AT": "AT&T",
    "TM": "T-Mobile",
    "SP": "Sprint",
    "WI": "WiFi",
    "HSO": "",
}
_STORAGE_TOKENS: dict[str, str] = {
    "64": "64GB",
    "128": "128GB",
    "256": "256GB",
    "512": "512GB",
    "1T": "1TB",
}
_COLOR_TOKENS: dict[str, str] = {
    "BLU": "Blue",
    "BLA": "Black",
    "SIL": "Silver",
    "GLD": "Gold",
    "SPG": "Space Gray",
    "PUR": "Purple",
    "GRN": "Green",
    "RED": "Red",
    "WHT": "White",
    "YEL": "Yellow",
    "PIN": "Pink",
    "ROG": "Rose Gold",
    "GRA": "Graphite",
    "MID": "Midnight",
    "STA": "Starlight",
}
_GRADE_TOKENS: dict[str, str] = {
    "CAP1": "Premium 100%",
    "CAP": "Premium",
    "CA+": "Excellent",
    "CA": "Good",
    "CAB": "Good (Low Batt)",
    "SD": "B-Grade",
    "SD-": "C-Grade",
    "SDB": "B-Grade (Low Batt)",
}


def build_name_from_sku(sku: str) -> str:
    """Reconstruct a readable product name from SKU tokens.

    Used only when neither inventory nor sales carry a product name.

    Example:
        >>> build_name_from_sku("IPH13-UN-128-BLU-CA")
        'iPhone Unlocked 128GB Blue Good'
    """
    tokens: list[str] = []
    for part in sku.split("-"):
        upper = part.upper()
        if upper in _MANUFACTURER_TOKENS:
            tokens.append(_MANUFACTURER_TOKENS[upper])
            continue
        model = next(
            (name for code, name in _MODEL_TOKENS.items() if upper == code or upper.startswith(code)),
            None,
        )
        if model is not None:
            tokens.append(model)
            continue
        if upper in _CARRIER_TOKENS:
            if _CARRIER_TOKENS[upper]:
                tokens.append(_CARRIER_TOKENS[upper])
            continue
        if upper in _STORAGE_TOKENS:
            tokens.append(_STORAGE_TOKENS[upper])
            continue
        if upper in _COLOR_TOKENS:
            tokens.append(_COLOR_TOKENS[upper])
            continue
        if upper in _GRADE_TOKENS:
            tokens.append(_GRADE_TOKENS[upper])
            continue
        if upper == INTAKE_GRADE:
            continue
        tokens.append(part)
    return " ".join(tokens) or sku
