"""Registry lookups and the loose platform-name matching used to place model prices."""
import pytest

from pricecompass.platforms import (
    PLATFORMS,
    find_price,
    get_platform,
    normalize_platform_name,
    platform_links,
    platforms_match,
    price_roster,
)
from pricecompass.schemas.insight import PlatformPrice


def test_normalize_strips_case_and_punctuation():
    assert normalize_platform_name("CeX / Webuy MY") == "cexwebuymy"
    assert normalize_platform_name("  e-Bay!! ") == "ebay"
    assert normalize_platform_name("") == ""


@pytest.mark.parametrize(
    "label, registry_name",
    [
        ("CeX / Webuy MY", "CeX"),
        ("eBay", "eBay"),
        ("Shopee Malaysia", "Shopee"),
        ("pricecharting.com", "PriceCharting"),
    ],
)
def test_model_labels_match_registry(label, registry_name):
    assert platforms_match(label, registry_name)
    assert platforms_match(registry_name, label)


def test_unrelated_or_empty_names_do_not_match():
    assert not platforms_match("Amazon", "eBay")
    assert not platforms_match("---", "CeX")
    assert not platforms_match("", "")


def test_find_price_returns_first_matching_entry():
    prices = [
        PlatformPrice(platform="eBay", price="MYR 210", status="Avg Listed"),
        PlatformPrice(platform="CeX / Webuy MY", price="MYR 150", status="WeSell Price"),
        PlatformPrice(platform="CeX", price="MYR 999", status="duplicate"),
    ]
    assert find_price(get_platform("cex"), prices).price == "MYR 150"
    assert find_price(get_platform("carousell"), prices) is None


def test_price_roster_is_the_four_priced_marketplaces():
    assert [p.id for p in price_roster()] == ["pricecharting", "ebay", "shopee", "cex"]
    assert len(PLATFORMS) > len(price_roster())


def test_search_urls_encode_the_trimmed_query():
    ebay = get_platform("ebay")
    assert ebay.search_url("  Mario Kart & Friends ") == "https://www.ebay.com/sch/i.html?_nkw=Mario%20Kart%20%26%20Friends"
    assert get_platform("carousell").search_url("a/b") == "https://www.carousell.com.my/search/a%2Fb"


def test_platform_links_cover_the_registry():
    links = platform_links("zelda")
    assert [link.id for link in links] == [p.id for p in PLATFORMS]
    assert all("zelda" in link.url for link in links)


@pytest.mark.parametrize(
    "price, status, available",
    [
        ("MYR 180", "Market Price", True),
        ("---", "Check Website", False),
        ("MYR 50", "Not Found", False),
        ("N/A", "Avg Listed", False),
        ("", "Listed", False),
    ],
)
def test_price_availability(price, status, available):
    assert PlatformPrice(platform="eBay", price=price, status=status).is_available is available
