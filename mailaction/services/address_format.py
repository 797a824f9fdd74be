from html import escape
from typing import Any, Dict, List, Union

Address = Dict[str, Any]


def _render_address(entry: Address, compact: bool) -> str:
    if entry.get("group") is not None:
        members = render_addresses_html(entry["group"], compact)
        return f"{escape(entry.get('name') or '')}: {members};"

    address = entry.get("address") or ""
    name = entry.get("name") or ""
    if compact:
        label = escape(name or address)
    elif name and address:
        label = f"{escape(name)} &lt;{escape(address)}&gt;"
    else:
        label = escape(name or address)

    if not address:
        return f'<span class="message-address">{label}</span>'
    return (
        f'<a href="mailto:{escape(address)}" class="message-address" '
        f'title="{escape(address)}">{label}</a>'
    )


def render_addresses_html(
    addresses: Union[Address, List[Address], None], compact: bool = False
) -> str:
    """Render address header values as HTML links.

    Accepts a single ``{"name", "address"}`` dict, a list of them, or group
    entries carrying a nested ``group`` list. In compact mode only the
    display name is shown.
    """
    if not addresses:
        return ""
    if isinstance(addresses, dict):
        addresses = [addresses]
    return ", ".join(
        _render_address(a, compact) for a in addresses if isinstance(a, dict)
    )
