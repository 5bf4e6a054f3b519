"""
Reference data for the BDC import scripts.

TRACKED_BDCS            - publicly traded BDCs (ticker, name, CIK)
EXCLUDED_TICKERS        - ETFs, notes and non-BDC entities in the raw list
REPRESENTATIVE_ALLOCATIONS
                        - sector mix (percent of fair value) and total AUM per
                          CIK, approximated from fact sheets and filings; used
                          when SEC parsing yields too little
SECTOR_COMPANY_NAMES    - name pools for representative holdings
CURATED_METRICS         - per-ticker financial metrics snapshot
"""

from typing import NamedTuple, Optional

from app.services.portfolio import METRIC_FIELDS


class BdcReference(NamedTuple):
    ticker: str
    name: str
    cik: str


class Allocation(NamedTuple):
    total_aum: float
    sectors: dict[str, float]


_ALL_BDCS = (
    # Large BDCs (>$5B AUM)
    BdcReference("ARCC", "Ares Capital Corporation", "0001287750"),
    BdcReference("BXSL", "Blackstone Secured Lending Fund", "0001838831"),
    BdcReference("OBDC", "Blue Owl Capital Corporation", "0001791786"),
    BdcReference("FSK", "FS KKR Capital Corp.", "0001390777"),
    BdcReference("MAIN", "Main Street Capital Corporation", "0001396440"),
    BdcReference("GBDC", "Golub Capital BDC, Inc.", "0001489620"),
    BdcReference("ORCC", "Owl Rock Capital Corporation", "0001655888"),
    BdcReference("PSEC", "Prospect Capital Corporation", "0001287032"),
    # Mid-size BDCs ($1B-$5B AUM)
    BdcReference("HTGC", "Hercules Capital, Inc.", "0001280784"),
    BdcReference("TSLX", "Sixth Street Specialty Lending, Inc.", "0001571123"),
    BdcReference("NMFC", "New Mountain Finance Corporation", "0001496099"),
    BdcReference("GSBD", "Goldman Sachs BDC, Inc.", "0001572694"),
    BdcReference("OCSL", "Oaktree Specialty Lending Corporation", "0001414932"),
    BdcReference("TCPC", "BlackRock TCP Capital Corp.", "0001520697"),
    BdcReference("CSWC", "Capital Southwest Corporation", "0000017313"),
    BdcReference("MFIC", "MidCap Financial Investment Corporation", "0001446371"),
    BdcReference("SLRC", "SLR Investment Corp.", "0001418076"),
    BdcReference("BCSF", "Bain Capital Specialty Finance, Inc.", "0001655050"),
    BdcReference("CGBD", "Carlyle Secured Lending, Inc.", "0001655125"),
    BdcReference("CCAP", "Crescent Capital BDC, Inc.", "0001633336"),
    BdcReference("PFLT", "PennantPark Floating Rate Capital Ltd.", "0001491748"),
    BdcReference("PNNT", "PennantPark Investment Corp.", "0001412093"),
    # Smaller BDCs (<$1B AUM)
    BdcReference("TPVG", "TriplePoint Venture Growth BDC Corp.", "0001580345"),
    BdcReference("FDUS", "Fidus Investment Corporation", "0001513363"),
    BdcReference("GLAD", "Gladstone Capital Corporation", "0001257711"),
    BdcReference("GAIN", "Gladstone Investment Corporation", "0001319067"),
    BdcReference("HRZN", "Horizon Technology Finance Corporation", "0001487918"),
    BdcReference("WHF", "WhiteHorse Finance, Inc.", "0001527590"),
    BdcReference("MRCC", "Monroe Capital Corporation", "0001549595"),
    BdcReference("RWAY", "Runway Growth Finance Corp.", "0001811882"),
    BdcReference("NEWT", "Newtek Business Services Corp.", "0001587650"),
    BdcReference("CION", "CION Investment Corporation", "0001498201"),
    BdcReference("TRIN", "Trinity Capital Inc.", "0001580156"),
    BdcReference("OWL", "Blue Owl Capital Inc.", "0001823945"),
    BdcReference("SAR", "Saratoga Investment Corp.", "0001377936"),
    BdcReference("GECC", "Great Elm Capital Group, Inc.", "0001662691"),
    BdcReference("CPTA", "Capitala Finance Corp.", "0001575587"),
    BdcReference("RAND", "Rand Capital Corporation", "0000741292"),
    BdcReference("ICMB", "Investcorp Credit Management BDC", "0001660891"),
    BdcReference("PTMN", "Portman Ridge Finance Corporation", "0001411103"),
    BdcReference("SCM", "Stellus Capital Investment Corporation", "0001558568"),
    BdcReference("SUNS", "SLR Senior Investment Corp.", "0001523530"),
    BdcReference("XFLT", "XAI Octagon Floating Rate & Alternative Income Term Trust", "0001704720"),
    BdcReference("LRFC", "Logan Ridge Finance Corporation", "0001576280"),
    BdcReference("HCAP", "Harvest Capital Credit Corporation", "0001555074"),
    BdcReference("FDUSZ", "Fidus Investment Corporation Notes", "0001513363"),
    BdcReference("OXSQ", "Oxford Square Capital Corp.", "0001346610"),
    BdcReference("ECC", "Eagle Point Credit Company Inc.", "0001604174"),
    BdcReference("OFS", "OFS Capital Corporation", "0001546066"),
    BdcReference("FCRD", "First Eagle Alternative Capital BDC", "0001590715"),
    BdcReference("BIZD", "VanEck BDC Income ETF", "0001137360"),
    BdcReference("PECO", "Phillips Edison & Company, Inc.", "0001287032"),
    BdcReference("KREF", "KKR Real Estate Finance Trust Inc.", "0001631256"),
    BdcReference("BBDC", "Barings BDC, Inc.", "0001379785"),
    BdcReference("SLRA", "SLR Investment Corp - Notes", "0001418076"),
)

# ETFs, note issues, REITs and the Blue Owl asset manager share CIKs or
# tickers with real BDCs but are not BDCs themselves
EXCLUDED_TICKERS = frozenset({"BIZD", "XFLT", "ECC", "FDUSZ", "SLRA", "PECO", "KREF", "OWL"})

TRACKED_BDCS: tuple[BdcReference, ...] = tuple(
    bdc for bdc in _ALL_BDCS if bdc.ticker not in EXCLUDED_TICKERS
)


def _alloc(total_aum, software, healthcare, business, industrials, consumer, financial,
           media=0.0, energy=0.0, other=0.0, real_estate=0.0) -> Allocation:
    sectors = {
        "Software & Technology": software,
        "Healthcare": healthcare,
        "Business Services": business,
        "Industrials": industrials,
        "Consumer": consumer,
        "Financial Services": financial,
        "Media & Telecom": media,
        "Energy": energy,
        "Real Estate": real_estate,
        "Other": other,
    }
    return Allocation(total_aum, {sector: pct for sector, pct in sectors.items() if pct > 0})


# CIK -> sector mix. Positional order: software, healthcare, business services,
# industrials, consumer, financial services, then the smaller buckets.
REPRESENTATIVE_ALLOCATIONS: dict[str, Allocation] = {
    "0001287750": _alloc(25.0e9, 18.5, 14.2, 16.8, 12.5, 11.3, 8.2, media=5.8, energy=4.2, other=8.5),  # ARCC
    "0001791786": _alloc(13.5e9, 12.1, 18.3, 22.5, 14.2, 9.8, 11.4, media=4.2, energy=2.8, other=4.7),  # OBDC
    "0001838831": _alloc(10.2e9, 24.5, 16.8, 18.2, 11.5, 8.9, 9.8, media=4.5, energy=2.1, other=3.7),  # BXSL
    "0001396440": _alloc(7.2e9, 8.2, 11.5, 19.8, 24.5, 14.2, 6.8, media=5.2, energy=6.5, other=3.3),  # MAIN
    "0001390777": _alloc(15.8e9, 19.8, 15.2, 14.5, 13.8, 12.5, 10.2, media=6.8, energy=3.5, other=3.7),  # FSK
    "0001489620": _alloc(5.8e9, 28.5, 18.2, 15.5, 10.8, 9.5, 8.2, media=4.8, energy=1.5, other=3.0),  # GBDC
    "0001280784": _alloc(3.5e9, 42.5, 28.5, 8.2, 5.5, 6.8, 4.2, media=2.5, energy=0.8, other=1.0),  # HTGC
    "0001571123": _alloc(3.2e9, 22.8, 14.5, 18.5, 15.2, 11.8, 8.5, media=4.2, energy=2.5, other=2.0),  # TSLX
    "0001287032": _alloc(7.8e9, 8.5, 9.2, 12.5, 15.8, 14.5, 18.5, media=8.2, energy=8.5, real_estate=4.3),  # PSEC
    "0001496099": _alloc(3.1e9, 31.5, 22.8, 18.2, 8.5, 7.5, 5.8, media=3.2, energy=1.5, other=1.0),  # NMFC
    "0001572694": _alloc(3.8e9, 26.2, 19.5, 16.8, 12.5, 10.2, 7.5, media=4.5, energy=1.8, other=1.0),  # GSBD
    "0001655888": _alloc(14.2e9, 11.8, 19.5, 21.2, 15.8, 10.5, 10.2, media=5.5, energy=3.2, other=2.3),  # ORCC
    "0001520697": _alloc(1.8e9, 18.5, 16.2, 20.5, 14.8, 12.5, 8.2, media=5.5, energy=2.8, other=1.0),  # TCPC
    "0000017313": _alloc(1.4e9, 15.2, 18.8, 22.5, 16.5, 11.2, 7.8, media=4.5, energy=2.5, other=1.0),  # CSWC
    "0001414932": _alloc(2.9e9, 20.5, 15.8, 18.2, 16.5, 12.8, 7.5, media=4.2, energy=2.5, other=2.0),  # OCSL
    "0001580345": _alloc(0.92e9, 52.5, 32.5, 5.5, 2.5, 4.5, 1.5, other=1.0),  # TPVG
    "0001487918": _alloc(0.72e9, 48.5, 35.2, 6.5, 3.2, 4.5, 1.1, other=1.0),  # HRZN
    "0001580156": _alloc(1.65e9, 38.5, 28.2, 12.5, 8.5, 7.8, 2.5, other=2.0),  # TRIN
    "0001811882": _alloc(0.98e9, 45.2, 22.5, 15.8, 0.0, 8.5, 5.5, other=2.5),  # RWAY
    "0001446371": _alloc(2.2e9, 16.5, 14.8, 19.5, 18.2, 13.5, 9.2, media=4.8, energy=2.5, other=1.0),  # MFIC
    "0001418076": _alloc(2.1e9, 14.2, 22.5, 15.8, 16.5, 12.8, 9.5, media=5.2, energy=2.5, other=1.0),  # SLRC
    "0001655050": _alloc(1.85e9, 24.5, 18.2, 17.5, 14.5, 11.2, 7.8, media=4.3, energy=1.0, other=1.0),  # BCSF
    "0001655125": _alloc(1.75e9, 22.8, 16.5, 18.2, 15.8, 12.5, 7.2, media=4.5, energy=1.5, other=1.0),  # CGBD
    "0001633336": _alloc(1.6e9, 20.5, 17.8, 19.5, 15.2, 12.8, 7.5, media=4.2, energy=1.5, other=1.0),  # CCAP
    "0001491748": _alloc(1.15e9, 15.8, 14.5, 21.2, 18.5, 13.8, 8.2, media=4.5, energy=2.5, other=1.0),  # PFLT
    "0001412093": _alloc(1.08e9, 14.5, 15.2, 20.8, 19.2, 14.5, 7.8, media=4.5, energy=2.5, other=1.0),  # PNNT
    "0001513363": _alloc(0.98e9, 12.5, 18.5, 22.8, 20.5, 12.5, 6.2, media=4.5, energy=1.5, other=1.0),  # FDUS
    "0001257711": _alloc(0.52e9, 8.5, 12.5, 18.5, 25.8, 16.5, 8.2, media=5.5, energy=3.5, other=1.0),  # GLAD
    "0001319067": _alloc(0.58e9, 6.5, 10.8, 15.5, 28.5, 18.5, 9.2, media=6.5, energy=3.5, other=1.0),  # GAIN
    "0001527590": _alloc(0.68e9, 16.5, 14.8, 20.5, 18.2, 14.5, 8.2, media=4.8, energy=1.5, other=1.0),  # WHF
    "0001549595": _alloc(0.55e9, 14.2, 16.5, 22.8, 18.5, 13.8, 7.2, media=4.5, energy=1.5, other=1.0),  # MRCC
    "0001377936": _alloc(1.05e9, 18.5, 15.8, 20.2, 16.5, 13.5, 8.2, media=4.8, energy=1.5, other=1.0),  # SAR
    "0001558568": _alloc(0.92e9, 12.8, 14.5, 21.5, 20.2, 15.5, 8.5, media=4.5, energy=1.5, other=1.0),  # SCM
    "0001546066": _alloc(0.42e9, 15.5, 16.8, 19.5, 18.2, 14.5, 8.2, media=4.8, energy=1.5, other=1.0),  # OFS
    "0001379785": _alloc(2.4e9, 18.2, 15.5, 19.8, 16.2, 13.5, 8.5, media=5.2, energy=2.1, other=1.0),  # BBDC
}

SECTOR_COMPANY_NAMES: dict[str, tuple[str, ...]] = {
    "Software & Technology": (
        "Enterprise Software Holdings", "CloudOps Solutions", "DataStream Analytics",
        "CyberSecure Inc", "SaaS Platform Corp", "TechConnect Systems", "DevOps Tools Inc",
        "AI Solutions Group", "Digital Infrastructure LLC", "Software Dynamics",
    ),
    "Healthcare": (
        "MedTech Solutions", "Healthcare Services Group", "Pharma Distribution Inc",
        "Clinical Research Partners", "Medical Devices Corp", "Life Sciences Holdings",
        "Dental Practice Management", "Healthcare IT Systems", "Biotech Research Labs",
    ),
    "Business Services": (
        "Professional Services Group", "Staffing Solutions Inc", "Marketing Services Corp",
        "HR Outsourcing Partners", "Consulting Group Holdings", "Business Process Solutions",
        "Commercial Services LLC", "Management Consulting Inc", "Outsourcing Partners",
    ),
    "Industrials": (
        "Manufacturing Holdings", "Industrial Equipment Corp", "Distribution Services Inc",
        "Building Products Group", "Transportation Logistics LLC", "Aerospace Components",
        "Construction Materials Inc", "Machinery Systems Corp", "Industrial Solutions",
    ),
    "Consumer": (
        "Retail Holdings Group", "Restaurant Brands Inc", "Consumer Products Corp",
        "E-Commerce Solutions", "Hospitality Services LLC", "Entertainment Group",
        "Food & Beverage Holdings", "Consumer Services Inc", "Leisure Products Corp",
    ),
    "Financial Services": (
        "Specialty Finance Corp", "Insurance Services Group", "Asset Management Inc",
        "Financial Technology Holdings", "Lending Solutions LLC", "Investment Services",
    ),
    "Media & Telecom": (
        "Media Holdings Group", "Telecom Services Inc", "Broadcasting Corp",
        "Digital Media Solutions", "Communications Infrastructure LLC",
    ),
    "Energy": (
        "Energy Services Group", "Midstream Holdings", "Power Generation Inc",
        "Renewable Energy Corp", "Oil & Gas Services LLC",
    ),
    "Real Estate": (
        "Property Holdings Group", "Real Estate Services Inc", "Commercial Properties LLC",
    ),
    "Other": (
        "Diversified Holdings Inc", "Multi-Sector Corp", "Other Investments LLC",
    ),
}

# ticker -> (dividend_yield, dividend_growth_3yr, nav_per_share, price,
#            price_to_nav, non_accrual_pct, total_assets, debt_to_equity,
#            net_investment_income_yield)
_CURATED_ROWS: dict[str, tuple[float, ...]] = {
    # Large BDCs
    "ARCC": (9.2, 2.8, 19.25, 21.85, 1.14, 1.8, 25.0e9, 1.05, 10.5),
    "BXSL": (10.1, 8.5, 26.50, 29.20, 1.10, 0.4, 10.2e9, 1.15, 11.2),
    "OBDC": (10.8, 5.2, 15.80, 15.45, 0.98, 1.2, 13.5e9, 1.08, 11.8),
    "FSK": (13.5, -2.1, 23.40, 19.80, 0.85, 3.2, 15.8e9, 1.20, 13.2),
    "MAIN": (6.2, 4.5, 28.90, 52.80, 1.83, 0.8, 7.2e9, 0.85, 8.5),
    "GBDC": (10.5, 3.2, 15.20, 15.65, 1.03, 0.6, 5.8e9, 1.10, 11.0),
    "ORCC": (10.2, 4.8, 14.90, 14.25, 0.96, 1.5, 14.2e9, 1.12, 11.5),
    "PSEC": (11.8, -5.2, 8.20, 5.10, 0.62, 5.8, 7.8e9, 0.72, 10.2),
    # Mid-size BDCs
    "HTGC": (10.8, 6.5, 12.80, 20.50, 1.60, 2.1, 3.5e9, 1.05, 12.5),
    "TSLX": (9.0, 4.2, 17.50, 21.80, 1.25, 0.3, 3.2e9, 1.15, 10.8),
    "NMFC": (12.2, 1.5, 12.90, 12.50, 0.97, 2.5, 3.1e9, 1.18, 12.8),
    "GSBD": (11.5, 2.8, 14.20, 13.90, 0.98, 1.8, 3.8e9, 1.22, 12.2),
    "OCSL": (11.2, 3.5, 19.80, 19.20, 0.97, 1.2, 2.9e9, 1.08, 11.8),
    "TCPC": (12.8, 0.5, 13.40, 10.20, 0.76, 3.8, 1.8e9, 1.25, 13.5),
    "CSWC": (10.5, 7.2, 17.20, 25.80, 1.50, 0.5, 1.4e9, 0.92, 11.5),
    "MFIC": (12.5, 2.2, 13.80, 12.90, 0.93, 2.8, 2.2e9, 1.15, 13.0),
    "SLRC": (10.8, 1.8, 17.90, 15.80, 0.88, 2.2, 2.1e9, 1.10, 11.5),
    "BCSF": (11.5, 5.8, 17.40, 17.20, 0.99, 0.8, 1.85e9, 1.12, 12.0),
    "CGBD": (11.8, 3.2, 16.50, 16.80, 1.02, 1.5, 1.75e9, 1.08, 12.2),
    "CCAP": (10.2, 4.5, 18.90, 18.50, 0.98, 1.0, 1.6e9, 1.05, 11.0),
    "PFLT": (11.0, 2.5, 11.20, 10.90, 0.97, 1.8, 1.15e9, 1.15, 11.5),
    "PNNT": (11.5, 0.8, 7.80, 6.90, 0.88, 3.5, 1.08e9, 1.20, 12.0),
    # Smaller and venture BDCs
    "TPVG": (14.5, -8.2, 11.50, 9.20, 0.80, 6.5, 920e6, 0.95, 14.0),
    "FDUS": (10.2, 5.5, 19.50, 20.80, 1.07, 1.2, 980e6, 0.85, 11.0),
    "GLAD": (9.8, 3.8, 10.80, 11.20, 1.04, 1.5, 520e6, 0.78, 10.5),
    "GAIN": (7.5, 4.2, 14.90, 15.80, 1.06, 0.8, 580e6, 0.65, 8.5),
    "HRZN": (11.8, -2.5, 10.20, 11.50, 1.13, 4.2, 720e6, 1.02, 12.5),
    "WHF": (12.5, 1.2, 13.20, 12.50, 0.95, 2.8, 680e6, 1.10, 13.0),
    "MRCC": (13.2, -1.5, 11.50, 7.50, 0.65, 4.5, 550e6, 1.18, 13.5),
    "RWAY": (15.2, 12.5, 12.80, 10.50, 0.82, 3.8, 980e6, 0.88, 14.5),
    "NEWT": (14.8, 8.5, 12.50, 13.20, 1.06, 2.5, 850e6, 0.75, 15.0),
    "CION": (13.5, 2.8, 11.80, 10.90, 0.92, 3.2, 1.85e9, 1.15, 13.8),
    "TRIN": (14.0, 15.2, 13.80, 14.20, 1.03, 2.8, 1.65e9, 0.95, 14.5),
    "SAR": (10.5, 5.8, 28.50, 27.80, 0.98, 1.5, 1.05e9, 0.82, 11.2),
    "GECC": (15.8, -5.5, 9.80, 8.50, 0.87, 5.2, 280e6, 1.25, 15.5),
    "CPTA": (12.8, -3.2, 8.90, 4.80, 0.54, 8.5, 320e6, 1.35, 13.2),
    "RAND": (5.2, 8.5, 18.20, 17.50, 0.96, 0.5, 85e6, 0.25, 6.5),
    "ICMB": (14.2, 0.5, 6.20, 4.80, 0.77, 4.8, 420e6, 1.28, 14.5),
    "PTMN": (13.5, -2.8, 18.90, 15.20, 0.80, 4.2, 580e6, 1.15, 14.0),
    "SCM": (11.2, 3.5, 13.80, 13.50, 0.98, 1.8, 920e6, 0.95, 11.8),
    "SUNS": (10.5, 2.2, 15.20, 14.80, 0.97, 1.2, 380e6, 1.05, 11.0),
    "LRFC": (14.5, -6.2, 8.50, 6.20, 0.73, 7.5, 280e6, 1.32, 14.8),
    "HCAP": (13.8, -4.5, 9.20, 7.80, 0.85, 5.8, 180e6, 1.15, 14.2),
    "OXSQ": (16.5, -8.5, 3.20, 2.50, 0.78, 12.5, 350e6, 0.85, 15.0),
    "OFS": (13.2, -1.8, 11.50, 9.80, 0.85, 3.8, 420e6, 1.08, 13.5),
    "FCRD": (12.5, 1.5, 5.80, 4.50, 0.78, 6.2, 320e6, 1.22, 13.0),
    "BBDC": (10.8, 4.2, 11.20, 10.50, 0.94, 1.5, 2.4e9, 1.08, 11.5),
}

CURATED_METRICS: dict[str, dict[str, float]] = {
    ticker: dict(zip(METRIC_FIELDS, row)) for ticker, row in _CURATED_ROWS.items()
}


def get_curated_metrics(ticker: Optional[str]) -> Optional[dict[str, float]]:
    """Curated metrics for a ticker, or None when the ticker is not covered."""
    if not ticker:
        return None
    metrics = CURATED_METRICS.get(ticker.upper())
    return dict(metrics) if metrics else None
