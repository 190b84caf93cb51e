"""
SkyRoute - Reference data
Airline and destination directories keyed by IATA code.

Tables are built once at import time and never mutated; consumers receive a
ReferenceDataProvider instead of reaching into module globals.
"""

from types import MappingProxyType
from typing import Dict, Generic, Iterable, Mapping, Optional, TypeVar

from pydantic import BaseModel, ConfigDict


class Airline(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    name_ar: Optional[str] = None
    country: Optional[str] = None
    website_url: Optional[str] = None


class Destination(BaseModel):
    model_config = ConfigDict(frozen=True)

    airport_code: str
    city: str
    city_ar: Optional[str] = None
    country: str
    country_ar: Optional[str] = None
    airport_name: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════
# STATIC TABLES
# ═══════════════════════════════════════════════════════════════════

AIRLINES = [
    Airline(code="RB", name="Syrian Air", name_ar="السورية للطيران", country="Syria", website_url="https://www.syriaair.com"),
    Airline(code="6Q", name="Cham Wings Airlines", name_ar="أجنحة الشام", country="Syria", website_url="https://chamwings.com"),
    Airline(code="EK", name="Emirates", name_ar="طيران الإمارات", country="United Arab Emirates", website_url="https://www.emirates.com"),
    Airline(code="FZ", name="flydubai", name_ar="فلاي دبي", country="United Arab Emirates", website_url="https://www.flydubai.com"),
    Airline(code="G9", name="Air Arabia", name_ar="العربية للطيران", country="United Arab Emirates", website_url="https://www.airarabia.com"),
    Airline(code="QR", name="Qatar Airways", name_ar="الخطوط الجوية القطرية", country="Qatar", website_url="https://www.qatarairways.com"),
    Airline(code="TK", name="Turkish Airlines", name_ar="الخطوط الجوية التركية", country="Turkey", website_url="https://www.turkishairlines.com"),
    Airline(code="PC", name="Pegasus Airlines", name_ar="طيران بيغاسوس", country="Turkey", website_url="https://www.flypgs.com"),
    Airline(code="RJ", name="Royal Jordanian", name_ar="الملكية الأردنية", country="Jordan", website_url="https://www.rj.com"),
    Airline(code="SV", name="Saudia", name_ar="الخطوط السعودية", country="Saudi Arabia", website_url="https://www.saudia.com"),
    Airline(code="XY", name="flynas", name_ar="طيران ناس", country="Saudi Arabia", website_url="https://www.flynas.com"),
    Airline(code="ME", name="Middle East Airlines", name_ar="طيران الشرق الأوسط", country="Lebanon", website_url="https://www.mea.com.lb"),
]

DESTINATIONS = [
    Destination(airport_code="DAM", city="Damascus", city_ar="دمشق", country="Syria", country_ar="سوريا", airport_name="Damascus International Airport"),
    Destination(airport_code="ALP", city="Aleppo", city_ar="حلب", country="Syria", country_ar="سوريا", airport_name="Aleppo International Airport"),
    Destination(airport_code="DXB", city="Dubai", city_ar="دبي", country="United Arab Emirates", country_ar="الإمارات", airport_name="Dubai International Airport"),
    Destination(airport_code="SHJ", city="Sharjah", city_ar="الشارقة", country="United Arab Emirates", country_ar="الإمارات", airport_name="Sharjah International Airport"),
    Destination(airport_code="AUH", city="Abu Dhabi", city_ar="أبوظبي", country="United Arab Emirates", country_ar="الإمارات", airport_name="Zayed International Airport"),
    Destination(airport_code="DOH", city="Doha", city_ar="الدوحة", country="Qatar", country_ar="قطر", airport_name="Hamad International Airport"),
    Destination(airport_code="RUH", city="Riyadh", city_ar="الرياض", country="Saudi Arabia", country_ar="السعودية", airport_name="King Khalid International Airport"),
    Destination(airport_code="JED", city="Jeddah", city_ar="جدة", country="Saudi Arabia", country_ar="السعودية", airport_name="King Abdulaziz International Airport"),
    Destination(airport_code="AMM", city="Amman", city_ar="عمّان", country="Jordan", country_ar="الأردن", airport_name="Queen Alia International Airport"),
    Destination(airport_code="BEY", city="Beirut", city_ar="بيروت", country="Lebanon", country_ar="لبنان", airport_name="Beirut–Rafic Hariri International Airport"),
    Destination(airport_code="IST", city="Istanbul", city_ar="إسطنبول", country="Turkey", country_ar="تركيا", airport_name="Istanbul Airport"),
    Destination(airport_code="SAW", city="Istanbul", city_ar="إسطنبول", country="Turkey", country_ar="تركيا", airport_name="Sabiha Gökçen International Airport"),
    Destination(airport_code="CAI", city="Cairo", city_ar="القاهرة", country="Egypt", country_ar="مصر", airport_name="Cairo International Airport"),
    Destination(airport_code="KWI", city="Kuwait City", city_ar="الكويت", country="Kuwait", country_ar="الكويت", airport_name="Kuwait International Airport"),
    Destination(airport_code="BGW", city="Baghdad", city_ar="بغداد", country="Iraq", country_ar="العراق", airport_name="Baghdad International Airport"),
    Destination(airport_code="EBL", city="Erbil", city_ar="أربيل", country="Iraq", country_ar="العراق", airport_name="Erbil International Airport"),
]


# ═══════════════════════════════════════════════════════════════════
# PROVIDER
# ═══════════════════════════════════════════════════════════════════

T = TypeVar("T")


class ReferenceDataProvider(Generic[T]):
    """Read-only lookup of reference entities by IATA code."""

    def __init__(self, entries: Iterable[T], key: str):
        index: Dict[str, T] = {}
        for entry in entries:
            index[getattr(entry, key).upper()] = entry
        self._index: Mapping[str, T] = MappingProxyType(index)

    def lookup_by_code(self, code: Optional[str]) -> Optional[T]:
        if not code:
            return None
        return self._index.get(code.upper())

    def __len__(self) -> int:
        return len(self._index)


airlines = ReferenceDataProvider(AIRLINES, key="code")
destinations = ReferenceDataProvider(DESTINATIONS, key="airport_code")
