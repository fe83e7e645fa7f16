"""Static per-city reference data for synthetic listings and chat tips."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True, slots=True)
class CityProfile:
    """Landmarks and coordinates used when a kost has to be synthesized."""

    prefix: str
    area: str
    city: str
    province: str
    street: str
    latitude: float
    longitude: float
    district: str
    price_multiplier: float = 1.0
    campuses: List[str] = field(default_factory=list)
    malls: List[str] = field(default_factory=list)
    transport: List[str] = field(default_factory=list)
    local_facilities: List[str] = field(default_factory=list)


CITY_PROFILES: dict[str, CityProfile] = {
    "jakarta": CityProfile(
        prefix="Kos Exclusive",
        area="Jakarta Selatan",
        city="Jakarta",
        province="DKI Jakarta",
        street="Jl. Kemang Raya",
        latitude=-6.261493,
        longitude=106.8106,
        district="Kebayoran Baru",
        price_multiplier=1.5,
        campuses=["Universitas Indonesia", "BINUS University", "Atma Jaya University"],
        malls=["Kemang Village", "Pondok Indah Mall", "Senayan City"],
        transport=["TransJakarta", "MRT Jakarta", "Go-Jek/Grab"],
        local_facilities=["Deket MRT", "Deket TransJakarta", "Deket Mall"],
    ),
    "bandung": CityProfile(
        prefix="Kos Asri",
        area="Dago",
        city="Bandung",
        province="Jawa Barat",
        street="Jl. Ir. H. Djuanda",
        latitude=-6.890898,
        longitude=107.6101,
        district="Coblong",
        price_multiplier=1.2,
        campuses=["ITB", "Universitas Padjadjaran", "Universitas Kristen Maranatha"],
        malls=["Paris Van Java", "Bandung Indah Plaza", "Trans Studio Mall"],
        transport=["Angkot", "Trans Bandung Raya", "Go-Jek/Grab"],
        local_facilities=["Deket Kampus", "Deket PVJ", "Deket Cihampelas"],
    ),
    "yogyakarta": CityProfile(
        prefix="Kos Harmoni",
        area="Sleman",
        city="Yogyakarta",
        province="DI Yogyakarta",
        street="Jl. Kaliurang",
        latitude=-7.7956,
        longitude=110.3695,
        district="Depok",
        price_multiplier=1.0,
        campuses=["UGM", "Universitas Islam Indonesia", "Universitas Atma Jaya Yogyakarta"],
        malls=["Hartono Mall", "Jogja City Mall", "Ambarrukmo Plaza"],
        transport=["Trans Jogja", "Gojek/Grab", "Angkot"],
        local_facilities=["Deket UGM", "Deket Malioboro", "Deket Kaliurang"],
    ),
    "surabaya": CityProfile(
        prefix="Kos Premium",
        area="Surabaya Barat",
        city="Surabaya",
        province="Jawa Timur",
        street="Jl. Mayjen Sungkono",
        latitude=-7.2906,
        longitude=112.7344,
        district="Dukuh Pakis",
        price_multiplier=1.1,
        campuses=["ITS", "Universitas Airlangga", "Universitas Surabaya"],
        malls=["Tunjungan Plaza", "Surabaya Town Square", "Ciputra World"],
        transport=["Trans Semanggi Suroboyo", "Gojek/Grab", "Angkot"],
        local_facilities=["Deket ITS", "Deket Tunjungan", "Deket Bandara"],
    ),
}

CITY_ALIASES: dict[str, str] = {
    "jogja": "yogyakarta",
    "jogjakarta": "yogyakarta",
    "yogya": "yogyakarta",
    "jaksel": "jakarta",
    "jakarta selatan": "jakarta",
}


def city_profile(location: str) -> CityProfile:
    """Return the profile for ``location`` or a generic one named after it."""

    key = location.strip().lower()
    key = CITY_ALIASES.get(key, key)
    if key in CITY_PROFILES:
        return CITY_PROFILES[key]

    name = location.strip() or "Indonesia"
    return CityProfile(
        prefix="Kos Nyaman",
        area=name,
        city=name,
        province="Indonesia",
        street=f"Jl. {name} Raya",
        latitude=-6.2088,
        longitude=106.8456,
        district=name,
        campuses=["Universitas Terdekat"],
        malls=["Mall Terdekat"],
        transport=["Transportasi Umum"],
    )


CITY_RECOMMENDATIONS: dict[str, list[str]] = {
    "bandung": [
        "Kos Putri Dago - Deket ITB, fasilitas AC + WiFi, harga 1.2 juta/bulan",
        "Kos Campur Cihampelas - Deket mall, kamar mandi dalam, 900 ribu/bulan",
        "Kos Putra Antapani - Deket Telkom, parkir luas, 1 juta/bulan",
    ],
    "jakarta": [
        "Kos Putri Depok - Deket UI, fasilitas lengkap, 1.5 juta/bulan",
        "Kos Campur Jakarta Selatan - Deket kampus, 1.8 juta/bulan",
        "Kos Putra Jakarta Timur - Akses mudah, 1.3 juta/bulan",
    ],
    "yogyakarta": [
        "Kos Putri Sleman - Deket UGM, suasana tenang, 800 ribu/bulan",
        "Kos Campur Yogyakarta - Deket kraton, 1 juta/bulan",
        "Kos Putra Depok Sleman - Deket kampus, 900 ribu/bulan",
    ],
}
