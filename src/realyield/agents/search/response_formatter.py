"""Response formatter and reply templates for the listing search dialogue.

Tone: a helpful Dubai property agent replying in chat.
"""

from .contracts import Listing, SearchCriteria

NEXT_STEPS = (
    "What would you like to do next? You can ask to see more, "
    "refine the search, or save these criteria."
)

TEMPLATES = {
    "results_found": (
        "Here are {count} properties matching your criteria:\n\n{listings}\n\n" + NEXT_STEPS
    ),
    "more_results": (
        "Here are more options matching your criteria:\n\n{listings}\n\n" + NEXT_STEPS
    ),
    "no_more_results": (
        "I don't have any more listings that match your current criteria. "
        "Would you like to broaden your search or try different terms?"
    ),
    "more_results_error": (
        "I encountered an issue getting more listings. Would you like to try a different search?"
    ),
    "no_matches": (
        "I couldn't find any listings matching your specific criteria. "
        "Would you like to try a broader search or different terms?"
    ),
    "refine_prompt": (
        "Let's refine your search. Please tell me which aspect you'd like to adjust "
        "(area, property type, bedrooms, price range)?"
    ),
    "preferences_saved": (
        "I've saved your search preferences. I'll remember that you're interested in "
        "{summary}. You can ask me for \"new listings\" anytime to see the latest matches."
    ),
    "search_error": (
        "I encountered an issue searching for properties. Please try again with different criteria."
    ),
    "saved_results": (
        "Based on your saved preferences{latest_note}, here are {count} properties matching:"
        "\n\n{listings}\n\n"
        "What would you like to do next? You can ask to see more, refine the search, "
        "or update your saved preferences."
    ),
    "saved_no_matches": (
        "I couldn't find any current listings matching your saved preferences. "
        "Would you like to try different criteria?"
    ),
    "no_saved_preferences": (
        "I don't have any saved search preferences for you yet. What kind of property are you "
        "looking for? Please specify area, property type, number of bedrooms and/or price range."
    ),
    "saved_preferences_error": (
        "I encountered an issue with your saved preferences. "
        "Let's start a new search - what are you looking for?"
    ),
    "criteria_prompt": (
        "I can help you find property listings! Please provide some details about what "
        "you're looking for, such as:\n"
        "- Area (e.g., Dubai Marina, JVC, Downtown)\n"
        "- Property type (apartment, villa, etc.)\n"
        "- Number of bedrooms\n"
        "- Budget/price range\n\n"
        "For example: \"2 bedroom apartment in Dubai Marina under 1.5M AED\""
    ),
    "search_unavailable": (
        "I couldn't reach the listings service just now. "
    ),
    "link_fetch_failed": (
        "I had trouble retrieving that listing. Please try again later."
    ),
}


def get_template(key: str, **kwargs) -> str:
    """Get a reply template, with optional formatting."""
    template = TEMPLATES[key]
    try:
        return template.format(**kwargs)
    except (KeyError, IndexError):
        return template


def _one_line(value) -> str:
    return " ".join(str(value).splitlines())


def render_listings(listings: list[Listing]) -> str:
    """Numbered block: "1. Title – Price" with the link on the next line."""
    blocks = [
        f"{idx}. {_one_line(listing.title)} – {_one_line(listing.price)}\n<{listing.link}>"
        for idx, listing in enumerate(listings, start=1)
    ]
    return "\n\n".join(blocks)


def format_listings(listings: list[Listing]) -> str:
    """Render search results, or the no-match message when there are none."""
    if not listings:
        return get_template("no_matches")
    return get_template("results_found", count=len(listings), listings=render_listings(listings))


def describe_criteria(criteria: SearchCriteria) -> str:
    """Plain-English summary, e.g. "apartment 2 bedroom properties in JVC under AED 1,500,000"."""
    summary = ""
    if criteria.property_type:
        summary += f"{criteria.property_type} "
    if criteria.bedrooms:
        if criteria.bedrooms == "studio":
            summary += "studio "
        else:
            summary += f"{criteria.bedrooms} bedroom "
    summary += "properties"
    if criteria.area:
        summary += f" in {criteria.area}"
    if criteria.min_price:
        summary += f" over AED {criteria.min_price:,}"
    if criteria.max_price:
        summary += f" under AED {criteria.max_price:,}"
    return summary
