"""Property link analyzer — a rental or investment snapshot for one listing URL."""

import logging
import re

from realyield.agents.search.contracts import PropertyDetail, Reply
from realyield.agents.search.response_formatter import get_template
from realyield.domain.enums import ReplyAction

logger = logging.getLogger(__name__)

RENT_PATH_PATTERN = re.compile(r"/rent/")
MAX_AMENITIES = 5


def _amount(value: float | None) -> str:
    if value is None:
        return "N/A"
    return f"{value:,.0f}"


def price_per_sqft(detail: PropertyDetail) -> str:
    if not detail.size or detail.price is None:
        return "N/A"
    return f"{detail.price / detail.size:.0f}"


def build_analysis(detail: PropertyDetail, link: str) -> str:
    """Render the analysis text; rental links get rent insights, others a purchase snapshot."""
    is_rent = bool(RENT_PATH_PATTERN.search(link))
    ppsqft = price_per_sqft(detail)

    lines = [
        f"**{detail.title}**",
        f"{'Annual Rent' if is_rent else 'Asking Price'}: **AED {_amount(detail.price)}**",
    ]
    if detail.size:
        lines.append(f"Size: **{_amount(detail.size)} sqft** (AED {ppsqft}/sqft)")
    lines.append(f"Bedrooms/Bathrooms: **{detail.bedrooms} / {detail.bathrooms}**")
    lines.append(f"Location: {detail.location}")

    if is_rent:
        amenities = ", ".join(detail.amenities[:MAX_AMENITIES]) or "N/A"
        lines += [
            "",
            "__*Rental Insights*__",
            f"• Approx. rent per sqft: **AED {ppsqft}**",
            f"• Furnishing: {'Furnished' if detail.furnished else 'Unfurnished'}",
            f"• Key amenities: {amenities}",
            "",
            "*Recommendation:* Ensure the contract clarifies maintenance responsibilities "
            "and cheque schedule. Would you like help arranging a viewing or finding similar options?",
        ]
    else:
        lines += [
            "",
            "__*Investment Snapshot*__",
            f"• Price per sqft: **AED {ppsqft}** (compare to area avg)",
            "• Estimated gross yield: _coming soon_",
            "",
            "*Recommendation:* Review service charges and potential rental income to confirm "
            "net yield. Let me know if you want a deeper investment breakdown.",
        ]
    return "\n".join(lines)


class PropertyLinkAnalyzer:
    """Fetches listing detail through the gateway and replies with an analysis."""

    def __init__(self, gateway):
        self.gateway = gateway

    async def analyse(self, link: str, source: str | None = None) -> Reply:
        logger.info("[analyse] Analysing listing link %s", link)
        detail = await self.gateway.fetch_detail(link)
        actions = [ReplyAction.ANALYSE_PROPERTY_LINK.value]

        if detail is None:
            logger.warning("[analyse] No detail available for %s", link)
            return Reply(text=get_template("link_fetch_failed"), actions=actions, source=source)

        attachments = []
        if detail.image_url:
            attachments.append({"type": "image", "url": detail.image_url})

        return Reply(
            text=f"{build_analysis(detail, link)}\n\n<{link}>",
            actions=actions,
            source=source,
            attachments=attachments,
        )
