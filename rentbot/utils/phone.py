"""
Phone number and channel address normalization.
"""
CHANNEL_SUFFIX = "@s.whatsapp.net"
GROUP_SUFFIX = "@g.us"


def normalize_phone(address: str) -> str:
    """
    Reduce a channel address or phone number to the canonical landlord key.

    "+256700123456@s.whatsapp.net", "256700123456@s.whatsapp.net",
    "+256700123456" and "256700123456" all become "256700123456".
    """
    if not address:
        return ""

    phone = address.strip().split("@", 1)[0]
    if phone.startswith("+"):
        phone = phone[1:]
    return phone


def to_channel_address(phone: str) -> str:
    """Format a stored phone number as a channel address."""
    if "@" in phone:
        return phone
    return f"{normalize_phone(phone)}{CHANNEL_SUFFIX}"


def is_group_address(address: str) -> bool:
    """Group conversations carry their own address suffix."""
    return bool(address) and address.endswith(GROUP_SUFFIX)


def digits_only(value: str) -> str:
    """Strip formatting such as spaces and dashes from a display number."""
    return "".join(ch for ch in normalize_phone(value) if ch.isdigit())
