"""Reference data for California's 58 counties."""
from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass(frozen=True)
class County:
    name: str
    fips_code: str
    population: int
    seat_city: str
    website: str
    phone: str

    @property
    def full_name(self) -> str:
        if self.name == "San Francisco":
            return "City and County of San Francisco"
        return f"{self.name} County"

    @property
    def board_name(self) -> str:
        return f"{self.name} County Board of Supervisors"


# name, FIPS, population, county seat, website, main phone
_COUNTY_ROWS = [
    ("Alameda", "06001", 1671329, "Oakland", "https://www.acgov.org", "(510) 272-6691"),
    ("Alpine", "06003", 1204, "Markleeville", "https://www.alpinecountyca.gov", "(530) 694-2281"),
    ("Amador", "06005", 40474, "Jackson", "https://www.amadorgov.org", "(209) 223-6380"),
    ("Butte", "06007", 219186, "Oroville", "https://www.buttecounty.net", "(530) 538-7551"),
    ("Calaveras", "06009", 45905, "San Andreas", "https://www.calaverasgov.us", "(209) 754-6370"),
    ("Colusa", "06011", 21839, "Colusa", "https://www.countyofcolusa.org", "(530) 458-0200"),
    ("Contra Costa", "06013", 1165927, "Martinez", "https://www.contracosta.ca.gov", "(925) 335-1000"),
    ("Del Norte", "06015", 28100, "Crescent City", "https://www.co.del-norte.ca.us", "(707) 464-7204"),
    ("El Dorado", "06017", 193221, "Placerville", "https://www.edcgov.us", "(530) 621-5390"),
    ("Fresno", "06019", 1008654, "Fresno", "https://www.co.fresno.ca.us", "(559) 600-3481"),
    ("Glenn", "06021", 28393, "Willows", "https://www.countyofglenn.net", "(530) 934-6412"),
    ("Humboldt", "06023", 136463, "Eureka", "https://humboldtgov.org", "(707) 445-7266"),
    ("Imperial", "06025", 179702, "El Centro", "https://www.imperialcounty.org", "(760) 482-4271"),
    ("Inyo", "06027", 19016, "Independence", "https://www.inyocounty.us", "(760) 878-0373"),
    ("Kern", "06029", 909235, "Bakersfield", "https://www.kerncounty.com", "(661) 868-3585"),
    ("Kings", "06031", 152940, "Hanford", "https://www.countyofkings.com", "(559) 852-2362"),
    ("Lake", "06033", 68163, "Lakeport", "https://www.lakecountyca.gov", "(707) 263-2368"),
    ("Lassen", "06035", 32730, "Susanville", "https://www.lassencounty.org", "(530) 251-8217"),
    ("Los Angeles", "06037", 10014009, "Los Angeles", "https://www.lacounty.gov", "(213) 974-1311"),
    ("Madera", "06039", 157327, "Madera", "https://www.maderacounty.com", "(559) 675-7700"),
    ("Marin", "06041", 262321, "San Rafael", "https://www.marincounty.org", "(415) 473-7331"),
    ("Mariposa", "06043", 17131, "Mariposa", "https://www.mariposacounty.org", "(209) 966-2005"),
    ("Mendocino", "06045", 91305, "Ukiah", "https://www.mendocinocounty.org", "(707) 463-4221"),
    ("Merced", "06047", 281202, "Merced", "https://www.co.merced.ca.us", "(209) 385-7366"),
    ("Modoc", "06049", 8700, "Alturas", "https://www.co.modoc.ca.us", "(530) 233-6205"),
    ("Mono", "06051", 14444, "Bridgeport", "https://monocounty.ca.gov", "(760) 932-5420"),
    ("Monterey", "06053", 439035, "Salinas", "https://www.co.monterey.ca.us", "(831) 755-5073"),
    ("Napa", "06055", 140973, "Napa", "https://www.countyofnapa.org", "(707) 253-4580"),
    ("Nevada", "06057", 102241, "Nevada City", "https://www.mynevadacounty.com", "(530) 265-1298"),
    ("Orange", "06059", 3186989, "Santa Ana", "https://www.ocgov.com", "(714) 834-3100"),
    ("Placer", "06061", 404739, "Auburn", "https://www.placer.ca.gov", "(530) 889-4000"),
    ("Plumas", "06063", 19915, "Quincy", "https://www.plumascounty.us", "(530) 283-6207"),
    ("Riverside", "06065", 2418185, "Riverside", "https://www.rivco.org", "(951) 955-1110"),
    ("Sacramento", "06067", 1585055, "Sacramento", "https://www.saccounty.net", "(916) 874-5056"),
    ("San Benito", "06069", 64209, "Hollister", "https://www.cosb.us", "(831) 636-4000"),
    ("San Bernardino", "06071", 2181654, "San Bernardino", "https://www.sbcounty.gov", "(909) 387-8304"),
    ("San Diego", "06073", 3338330, "San Diego", "https://www.sandiegocounty.gov", "(619) 531-5800"),
    ("San Francisco", "06075", 873965, "San Francisco", "https://www.sf.gov", "(415) 554-4000"),
    ("San Joaquin", "06077", 779233, "Stockton", "https://www.sjgov.org", "(209) 468-3113"),
    ("San Luis Obispo", "06079", 282424, "San Luis Obispo", "https://www.slocounty.ca.gov", "(805) 781-5100"),
    ("San Mateo", "06081", 764442, "Redwood City", "https://www.smcgov.org", "(650) 363-4123"),
    ("Santa Barbara", "06083", 448229, "Santa Barbara", "https://www.countyofsb.org", "(805) 568-2190"),
    ("Santa Clara", "06085", 1936259, "San Jose", "https://www.sccgov.org", "(408) 299-5001"),
    ("Santa Cruz", "06087", 273170, "Santa Cruz", "https://www.santacruzcounty.us", "(831) 454-2000"),
    ("Shasta", "06089", 182155, "Redding", "https://www.co.shasta.ca.us", "(530) 225-5550"),
    ("Sierra", "06091", 3236, "Downieville", "https://www.sierracounty.ca.gov", "(530) 289-3251"),
    ("Siskiyou", "06093", 44937, "Yreka", "https://www.co.siskiyou.ca.us", "(530) 842-8081"),
    ("Solano", "06095", 453491, "Fairfield", "https://www.solanocounty.com", "(707) 784-6100"),
    ("Sonoma", "06097", 488863, "Santa Rosa", "https://sonomacounty.ca.gov", "(707) 565-2331"),
    ("Stanislaus", "06099", 552878, "Modesto", "https://www.stancounty.com", "(209) 525-6333"),
    ("Sutter", "06101", 99063, "Yuba City", "https://www.suttercounty.org", "(530) 822-7540"),
    ("Tehama", "06103", 65829, "Red Bluff", "https://www.co.tehama.ca.us", "(530) 527-8491"),
    ("Trinity", "06105", 16060, "Weaverville", "https://www.trinitycounty.org", "(530) 623-1351"),
    ("Tulare", "06107", 473117, "Visalia", "https://tularecounty.ca.gov", "(559) 636-5000"),
    ("Tuolumne", "06109", 55810, "Sonora", "https://www.tuolumnecounty.ca.gov", "(209) 533-5511"),
    ("Ventura", "06111", 843843, "Ventura", "https://www.ventura.org", "(805) 654-2681"),
    ("Yolo", "06113", 220500, "Woodland", "https://www.yolocounty.org", "(530) 666-8180"),
    ("Yuba", "06115", 81575, "Marysville", "https://www.yuba.org", "(530) 749-7840"),
]

CALIFORNIA_COUNTIES: Dict[str, County] = {
    row[0]: County(*row) for row in _COUNTY_ROWS
}


def _base_name(name: str) -> str:
    base = name.strip()
    for prefix in ("City and County of ",):
        if base.startswith(prefix):
            base = base[len(prefix):]
    if base.lower().endswith(" county"):
        base = base[: -len(" county")]
    return base.strip()


def find_county(name: Optional[str]) -> Optional[County]:
    """Look up a county by "Alameda", "Alameda County" or "alameda county"."""
    if not name:
        return None
    base = _base_name(name).lower()
    for county in CALIFORNIA_COUNTIES.values():
        if county.name.lower() == base:
            return county
    return None


def county_names() -> List[str]:
    return sorted(CALIFORNIA_COUNTIES)


__all__ = ["County", "CALIFORNIA_COUNTIES", "find_county", "county_names"]
