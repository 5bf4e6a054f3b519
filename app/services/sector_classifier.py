"""
Sector Classification

Maps the free-text industry labels BDCs print in their schedules of
investments to a fixed taxonomy of ten sectors.

Classification is first-match-wins: sectors are scanned in SECTORS order and,
within a sector, keywords in declared order. A label that mentions keywords
from two sectors resolves to the one declared first ("Healthcare Technology"
is Software & Technology, not Healthcare).
"""

from typing import Optional

OTHER_SECTOR = "Other"

# Display order. Not alphabetical; Other is always last.
SECTORS: tuple[str, ...] = (
    "Software & Technology",
    "Healthcare",
    "Business Services",
    "Industrials",
    "Consumer",
    "Financial Services",
    "Media & Telecom",
    "Energy",
    "Real Estate",
    OTHER_SECTOR,
)

# (sector, keywords) pairs in match order. Other has no keywords.
SECTOR_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Software & Technology", (
        "software", "saas", "technology", "tech", "it services", "data",
        "cloud", "cyber", "digital", "internet", "computer", "electronics",
        "semiconductor", "application", "platform", "analytics",
    )),
    ("Healthcare", (
        "health", "medical", "pharma", "biotech", "hospital", "clinical",
        "dental", "physician", "drug", "therapeutic", "diagnostic", "life science",
        "veterinary", "healthcare",
    )),
    ("Business Services", (
        "business services", "professional services", "staffing", "consulting",
        "outsourcing", "human resources", "hr services", "marketing services",
        "advertising", "commercial services",
    )),
    ("Industrials", (
        "industrial", "manufacturing", "aerospace", "defense", "machinery",
        "construction", "engineering", "transportation", "logistics",
        "distribution", "building products", "equipment",
    )),
    ("Consumer", (
        "consumer", "retail", "restaurant", "food", "beverage", "apparel",
        "leisure", "entertainment", "gaming", "hotel", "hospitality",
        "e-commerce", "education", "personal services",
    )),
    ("Financial Services", (
        "financial", "insurance", "banking", "asset management", "lending",
        "capital markets", "investment", "fintech",
    )),
    ("Media & Telecom", (
        "media", "telecom", "telecommunications", "broadcasting", "publishing",
        "communications", "wireless", "cable",
    )),
    ("Energy", (
        "energy", "oil", "gas", "petroleum", "pipeline", "power",
        "utilities", "renewable", "solar", "wind",
    )),
    ("Real Estate", (
        "real estate", "property", "reit", "housing",
    )),
)

# Chart colours, keyed by sector
SECTOR_COLORS: dict[str, str] = {
    "Software & Technology": "#3B82F6",  # blue
    "Healthcare": "#10B981",             # green
    "Business Services": "#8B5CF6",      # purple
    "Industrials": "#F59E0B",            # amber
    "Consumer": "#EC4899",               # pink
    "Financial Services": "#06B6D4",     # cyan
    "Media & Telecom": "#F97316",        # orange
    "Energy": "#84CC16",                 # lime
    "Real Estate": "#6366F1",            # indigo
    OTHER_SECTOR: "#6B7280",             # gray
}


def classify_sector(raw_industry: Optional[str]) -> str:
    """
    Classify a BDC-reported industry into a standardized sector.

    Never fails: None, blank text and text with no keyword match all
    return "Other".

        classify_sector("Healthcare & Pharmaceuticals") -> "Healthcare"
        classify_sector("Diversified Holding")           -> "Other"
    """
    if not raw_industry:
        return OTHER_SECTOR

    industry = raw_industry.lower().strip()
    if not industry:
        return OTHER_SECTOR

    for sector, keywords in SECTOR_KEYWORDS:
        for keyword in keywords:
            if keyword in industry:
                return sector

    return OTHER_SECTOR


def is_sector(value: str) -> bool:
    return value in SECTORS


def get_sector_color(sector: str) -> str:
    """Chart colour for a sector; unknown names get the Other colour."""
    return SECTOR_COLORS.get(sector, SECTOR_COLORS[OTHER_SECTOR])
