"""
Application configuration: static keyword tables and environment settings.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Literal, Mapping, Optional, Tuple

from pydantic_settings import BaseSettings, SettingsConfigDict

SentimentFormula = Literal["ratio", "densityNormalized"]
ScoreWeighting = Literal["engagement", "uniform"]
CollectorName = Literal["reddit", "google_news"]


# Topic seeds: topic name -> trigger substrings (case-insensitive, no word boundary)
TOPIC_SEEDS: Dict[str, Tuple[str, ...]] = {
    "border security": ("border", "wall", "immigration", "migrant", "crossing", "deportation", "ice", "cbp", "asylum"),
    "energy & grid": ("ercot", "grid", "power outage", "energy", "electricity", "blackout", "solar", "wind farm", "oil", "natural gas", "pipeline"),
    "education": ("school", "education", "teacher", "voucher", "curriculum", "student", "university", "tuition", "isd"),
    "healthcare": ("healthcare", "medicaid", "hospital", "insurance", "clinic", "mental health", "drug price", "pharmaceutical"),
    "economy & jobs": ("economy", "jobs", "unemployment", "inflation", "housing market", "wage", "business", "recession"),
    "abortion": ("abortion", "reproductive", "roe", "planned parenthood", "pro-life", "pro-choice"),
    "gun policy": ("gun", "firearm", "shooting", "second amendment", "2a", "nra", "open carry"),
    "water & drought": ("water", "drought", "flood", "reservoir", "aquifer", "water supply", "water rights"),
    "crime & safety": ("crime", "police", "prison", "arrest", "murder", "fentanyl", "cartel", "gang"),
    "elections": ("vote", "election", "ballot", "primary", "campaign", "polling", "runoff", "voter"),
    "housing": ("housing", "homeless", "rent", "mortgage", "affordable housing", "zoning", "eviction"),
    "transportation": ("highway", "i-35", "traffic", "transit", "txdot", "toll road", "high speed rail"),
    "property tax": ("property tax", "appraisal", "homestead", "tax relief", "tax rate"),
    "tech & innovation": ("tech", "ai", "startup", "spacex", "tesla", "semiconductor", "data center"),
}

# Region seeds. Declaration order is canonical: the first region with a hit wins.
TX_REGIONS: Dict[str, Tuple[str, ...]] = {
    "gulf-coast": ("houston", "galveston", "beaumont", "pasadena", "sugar land", "woodlands", "katy", "baytown", "pearland", "league city", "port arthur", "corpus christi", "htx", "htown"),
    "north-texas": ("dallas", "fort worth", "plano", "arlington", "denton", "frisco", "mckinney", "garland", "irving", "dfw", "richardson"),
    "central-texas": ("austin", "waco", "san marcos", "round rock", "temple", "killeen", "georgetown", "pflugerville", "atx"),
    "south-texas": ("san antonio", "laredo", "mcallen", "brownsville", "harlingen", "rgv", "rio grande", "edinburg", "satx"),
    "west-texas": ("el paso", "midland", "odessa", "lubbock", "amarillo", "abilene", "san angelo"),
    "east-texas": ("tyler", "longview", "nacogdoches", "lufkin", "texarkana", "marshall", "etx"),
}

REGION_LABELS: Dict[str, str] = {
    "gulf-coast": "Houston / Gulf Coast",
    "north-texas": "Dallas-Fort Worth",
    "central-texas": "Austin / Central TX",
    "south-texas": "San Antonio / South TX",
    "west-texas": "West Texas",
    "east-texas": "East Texas",
}

# Sentiment word lists (whole-word matches)
POSITIVE_WORDS: Tuple[str, ...] = (
    "great", "good", "excellent", "strong", "positive", "support", "success", "win",
    "approve", "progress", "reform", "boost", "improve", "protect", "secure", "benefit", "growth",
)
NEGATIVE_WORDS: Tuple[str, ...] = (
    "bad", "poor", "failed", "weak", "negative", "crisis", "disaster", "corrupt", "scandal",
    "oppose", "reject", "waste", "broken", "dangerous", "threat", "attack", "fear", "decline",
)

# Ordered category table. A post belongs to the first category whose keywords
# intersect its matched topics.
CATEGORY_TABLE: Dict[str, Tuple[str, ...]] = {
    "Cost of Living": ("housing", "rent", "property tax", "property taxes"),
    "Economy": ("economy & jobs", "employment", "unemployment", "power grid", "ercot", "energy & grid"),
    "Health Care": ("healthcare", "hospital", "medicaid"),
    "Education": ("education", "schools", "teachers"),
}

# Keyword-based collection: a Reddit post is kept only if one of these occurs
MONITORED_KEYWORDS: Tuple[str, ...] = (
    "border security", "energy & grid", "power grid", "ercot", "education", "schools",
    "teachers", "healthcare", "hospital", "medicaid", "economy & jobs", "employment",
    "unemployment", "abortion", "gun policy", "second amendment", "water & drought",
    "water rights", "crime & safety", "police", "elections", "voting", "housing", "rent",
    "property tax", "property taxes",
)

MONITORED_SUBREDDITS: Tuple[str, ...] = (
    "texas", "houston", "austin", "dallas", "sanantonio", "politics", "conservative", "liberal",
)

# Free-text collection: issue-focused search terms, no politician names
ISSUE_TERMS: Tuple[str, ...] = (
    "Texas border", "Texas energy", "ERCOT", "Texas education", "Texas healthcare",
    "Texas housing", "Texas crime", "Texas abortion", "Texas gun", "Texas water",
    "Texas drought", "Texas election", "Texas property tax", "Texas transportation",
)

# Which sentiment formula and score weighting each collector uses
COLLECTOR_PROFILES: Dict[str, Tuple[SentimentFormula, ScoreWeighting]] = {
    "reddit": ("densityNormalized", "engagement"),
    "google_news": ("ratio", "uniform"),
}

# Demo headlines per topic, used by the synthetic snapshot
SAMPLE_MENTIONS: Dict[str, Tuple[str, ...]] = {
    "border security": (
        "Texas border crossings hit new daily record amid federal policy debate",
        "Governor deploys additional National Guard to border region",
        "Border security funding bill advances through state legislature",
    ),
    "energy & grid": (
        "ERCOT issues conservation alert as summer temperatures surge",
        "Texas wind farms generate record power output this quarter",
        "Grid reliability concerns as new data centers strain capacity",
    ),
    "education": (
        "School voucher bill faces final vote in Texas House",
        "Teacher shortage reaches critical levels in rural districts",
        "State funding increase approved for public school districts",
    ),
    "healthcare": (
        "Rural hospital closures accelerate across East Texas",
        "Medicaid expansion debate resurfaces in legislature",
        "Mental health funding bill gains bipartisan support",
    ),
    "economy & jobs": (
        "Texas unemployment falls to lowest level in two years",
        "Tech layoffs hit Austin hard as major firms restructure",
        "Small business growth surges in DFW metro area",
    ),
    "abortion": (
        "New legal challenge filed against state abortion restrictions",
        "Reproductive healthcare access varies widely by region",
        "Abortion debate dominates primary campaign messaging",
    ),
    "gun policy": (
        "Open carry expansion bill introduced in special session",
        "Gun violence prevention advocates rally at state capitol",
        "School safety measures debated after recent incidents",
    ),
    "water & drought": (
        "West Texas water levels drop to historic lows",
        "State water board approves new conservation measures",
        "Drought conditions expand across Panhandle region",
    ),
    "crime & safety": (
        "Fentanyl seizures surge along southern corridor",
        "Police staffing shortages hit major metro areas",
        "Property crime rates diverge between urban and suburban areas",
    ),
    "elections": (
        "Early voting turnout surpasses midterm projections",
        "Redistricting challenges head to federal court",
        "Campaign spending hits record levels in state races",
    ),
    "housing": (
        "Housing affordability crisis deepens in Austin metro",
        "Houston homelessness numbers show slight decline",
        "New zoning proposals face pushback in Dallas suburbs",
    ),
    "property tax": (
        "Property appraisals jump 15% in major metro areas",
        "Homestead exemption increase signed into law",
        "Tax relief measures face implementation challenges",
    ),
    "transportation": (
        "I-35 expansion project enters controversial new phase",
        "High speed rail proposal between Houston and Dallas revived",
        "TxDOT announces major highway funding allocation",
    ),
    "tech & innovation": (
        "New semiconductor fab breaks ground outside Austin",
        "AI startups flock to Texas amid favorable business climate",
        "SpaceX Starbase expansion draws mixed reactions in South TX",
    ),
}


@dataclass(frozen=True)
class PulseConfig:
    """Read-only keyword tables shared by the tagger, aggregator and builders."""

    topic_seeds: Mapping[str, Tuple[str, ...]]
    regions: Mapping[str, Tuple[str, ...]]
    region_labels: Mapping[str, str]
    positive_words: Tuple[str, ...]
    negative_words: Tuple[str, ...]
    categories: Mapping[str, Tuple[str, ...]]
    sentiment_formula: SentimentFormula = "ratio"

    @property
    def topic_names(self) -> Tuple[str, ...]:
        return tuple(self.topic_seeds)


def default_config(sentiment_formula: SentimentFormula = "ratio") -> PulseConfig:
    """Freeze the module tables into a PulseConfig."""
    return PulseConfig(
        topic_seeds=MappingProxyType(dict(TOPIC_SEEDS)),
        regions=MappingProxyType(dict(TX_REGIONS)),
        region_labels=MappingProxyType(dict(REGION_LABELS)),
        positive_words=POSITIVE_WORDS,
        negative_words=NEGATIVE_WORDS,
        categories=MappingProxyType(dict(CATEGORY_TABLE)),
        sentiment_formula=sentiment_formula,
    )


class Settings(BaseSettings):
    """Environment-driven runtime settings (reads `.env` when present)."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Collection
    COLLECTOR: CollectorName = "reddit"
    SENTIMENT_FORMULA: Optional[SentimentFormula] = None
    SCORE_WEIGHTING: Optional[ScoreWeighting] = None
    REQUEST_DELAY_SECONDS: float = 1.0
    FETCH_TIMEOUT_SECONDS: float = 15.0
    POST_WINDOW_HOURS: int = 24
    REDDIT_LISTING_LIMIT: int = 100
    USER_AGENT: str = (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0 Safari/537.36"
    )

    # Serving
    USE_DEMO: bool = False
    HISTORY_DAYS: int = 30

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @property
    def sentiment_formula(self) -> SentimentFormula:
        return self.SENTIMENT_FORMULA or COLLECTOR_PROFILES[self.COLLECTOR][0]

    @property
    def score_weighting(self) -> ScoreWeighting:
        return self.SCORE_WEIGHTING or COLLECTOR_PROFILES[self.COLLECTOR][1]


def get_settings() -> Settings:
    return Settings()
