"""Static marketplace registry and platform-name matching."""
import re

from pricecompass.schemas.insight import PlatformPrice
from pricecompass.schemas.platform import PlatformConfig, PlatformLink

PLATFORMS: tuple[PlatformConfig, ...] = (
    PlatformConfig(
        id="pricecharting",
        name="PriceCharting",
        url_template="https://www.pricecharting.com/search-products?q={query}&type=prices",
        color="bg-blue-600",
        description="Historic loose / CIB / new prices",
        price_label="PriceCharting",
        price_hint="Look for 'loose', 'cib', or 'new' price",
        price_status="Market Price",
    ),
    PlatformConfig(
        id="ebay",
        name="eBay",
        url_template="https://www.ebay.com/sch/i.html?_nkw={query}",
        color="bg-yellow-500",
        description="Global auctions and listings",
        price_label="eBay",
        price_hint="Look for 'buy it now' or recent sold",
        price_status="Avg Listed",
    ),
    PlatformConfig(
        id="shopee",
        name="Shopee",
        url_template="https://shopee.com.my/search?keyword={query}",
        color="bg-orange-500",
        description="Malaysian marketplace listings",
        price_label="Shopee Malaysia",
        price_hint="Look for actual listing prices",
        price_status="Low-High",
    ),
    PlatformConfig(
        id="cex",
        name="CeX",
        url_template="https://my.webuy.com/search?stext={query}",
        color="bg-red-600",
        description="Second-hand trade-in store",
        price_label="CeX / Webuy MY",
        price_hint="Look for 'WeSell' price",
        price_status="WeSell Price",
    ),
    PlatformConfig(
        id="carousell",
        name="Carousell",
        url_template="https://www.carousell.com.my/search/{query}",
        color="bg-rose-500",
        description="Local second-hand classifieds",
    ),
    PlatformConfig(
        id="mercari",
        name="Mercari Japan",
        url_template="https://jp.mercari.com/search?keyword={query}",
        color="bg-slate-600",
        description="Japanese flea-market app",
    ),
)


def price_roster() -> list[PlatformConfig]:
    """Platforms the price prompt asks the model about, in display order."""
    return [p for p in PLATFORMS if p.has_price_lookup]


def get_platform(platform_id: str) -> PlatformConfig | None:
    for platform in PLATFORMS:
        if platform.id == platform_id:
            return platform
    return None


def normalize_platform_name(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", (name or "").lower())


def platforms_match(a: str, b: str) -> bool:
    """Loose match so "CeX / Webuy MY" from the model lines up with "CeX"."""
    left = normalize_platform_name(a)
    right = normalize_platform_name(b)
    if not left or not right:
        return False
    return left in right or right in left


def find_price(platform: PlatformConfig, prices: list[PlatformPrice]) -> PlatformPrice | None:
    for entry in prices:
        if platforms_match(entry.platform, platform.name):
            return entry
    return None


def platform_links(query: str) -> list[PlatformLink]:
    return [
        PlatformLink(
            id=p.id,
            name=p.name,
            color=p.color,
            description=p.description,
            url=p.search_url(query),
        )
        for p in PLATFORMS
    ]
