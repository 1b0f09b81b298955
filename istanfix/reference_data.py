"""
Built-in reference data: issue categories, the 39 districts of Istanbul and a
curated set of neighborhoods per district.
"""

from typing import Dict, List, Tuple

# (name, icon, description)
CATEGORIES: List[Tuple[str, str, str]] = [
    ("Roads & Potholes", "🛣️", "Potholes, cracked asphalt, damaged pavements and curbs"),
    ("Street Lighting", "💡", "Broken, flickering or missing street lights"),
    ("Waste & Sanitation", "🗑️", "Overflowing bins, illegal dumping, missed collections"),
    ("Water & Sewage", "💧", "Leaking pipes, blocked drains, sewage overflow"),
    ("Parks & Green Spaces", "🌳", "Damaged playgrounds, fallen trees, neglected parks"),
    ("Traffic & Signage", "🚦", "Faulty signals, missing or damaged road signs"),
    ("Other", "❓", "Any other municipal infrastructure issue"),
]

# (name, telephone area code) - 212 European side, 216 Anatolian side
DISTRICTS: List[Tuple[str, str]] = [
    ("Adalar", "216"),
    ("Arnavutköy", "212"),
    ("Ataşehir", "216"),
    ("Avcılar", "212"),
    ("Bağcılar", "212"),
    ("Bahçelievler", "212"),
    ("Bakırköy", "212"),
    ("Başakşehir", "212"),
    ("Bayrampaşa", "212"),
    ("Beşiktaş", "212"),
    ("Beykoz", "216"),
    ("Beylikdüzü", "212"),
    ("Beyoğlu", "212"),
    ("Büyükçekmece", "212"),
    ("Çatalca", "212"),
    ("Çekmeköy", "216"),
    ("Esenler", "212"),
    ("Esenyurt", "212"),
    ("Eyüpsultan", "212"),
    ("Fatih", "212"),
    ("Gaziosmanpaşa", "212"),
    ("Güngören", "212"),
    ("Kadıköy", "216"),
    ("Kağıthane", "212"),
    ("Kartal", "216"),
    ("Küçükçekmece", "212"),
    ("Maltepe", "216"),
    ("Pendik", "216"),
    ("Sancaktepe", "216"),
    ("Sarıyer", "212"),
    ("Silivri", "212"),
    ("Sultanbeyli", "216"),
    ("Sultangazi", "212"),
    ("Şile", "216"),
    ("Şişli", "212"),
    ("Tuzla", "216"),
    ("Ümraniye", "216"),
    ("Üsküdar", "216"),
    ("Zeytinburnu", "212"),
]

# district name -> [(neighborhood name, postal code)]
NEIGHBORHOODS: Dict[str, List[Tuple[str, str]]] = {
    "Adalar": [
        ("Büyükada", "34970"),
        ("Heybeliada", "34973"),
        ("Burgazada", "34975"),
        ("Kınalıada", "34976"),
    ],
    "Ataşehir": [
        ("Barbaros", "34746"),
        ("Atatürk", "34758"),
        ("Küçükbakkalköy", "34750"),
    ],
    "Bakırköy": [
        ("Yeşilköy", "34149"),
        ("Ataköy 1. Kısım", "34158"),
        ("Florya", "34153"),
        ("Zeytinlik", "34140"),
    ],
    "Beşiktaş": [
        ("Bebek", "34342"),
        ("Etiler", "34337"),
        ("Levent", "34330"),
        ("Ortaköy", "34347"),
        ("Arnavutköy", "34345"),
    ],
    "Beykoz": [
        ("Anadoluhisarı", "34810"),
        ("Kanlıca", "34810"),
        ("Paşabahçe", "34800"),
    ],
    "Beyoğlu": [
        ("Cihangir", "34433"),
        ("Kemankeş Karamustafa Paşa", "34425"),
        ("Gümüşsuyu", "34437"),
        ("Kasımpaşa", "34440"),
    ],
    "Esenyurt": [
        ("Cumhuriyet", "34510"),
        ("Fatih", "34513"),
    ],
    "Eyüpsultan": [
        ("Eyüp Merkez", "34050"),
        ("Göktürk", "34077"),
    ],
    "Fatih": [
        ("Sultanahmet", "34122"),
        ("Balat", "34087"),
        ("Aksaray", "34096"),
        ("Süleymaniye", "34116"),
    ],
    "Kadıköy": [
        ("Moda", "34710"),
        ("Fenerbahçe", "34726"),
        ("Caddebostan", "34728"),
        ("Göztepe", "34730"),
        ("Kozyatağı", "34742"),
    ],
    "Kartal": [
        ("Kordonboyu", "34860"),
        ("Soğanlık", "34880"),
    ],
    "Küçükçekmece": [
        ("Halkalı Merkez", "34303"),
        ("Sefaköy", "34295"),
    ],
    "Maltepe": [
        ("İdealtepe", "34841"),
        ("Bağlarbaşı", "34844"),
        ("Cevizli", "34846"),
    ],
    "Pendik": [
        ("Kurtköy", "34912"),
        ("Batı", "34890"),
    ],
    "Sarıyer": [
        ("Tarabya", "34457"),
        ("Yeniköy", "34464"),
        ("Emirgan", "34467"),
        ("Rumelihisarı", "34470"),
    ],
    "Şişli": [
        ("Teşvikiye", "34365"),
        ("Mecidiyeköy", "34387"),
        ("Bomonti", "34381"),
    ],
    "Ümraniye": [
        ("Atakent", "34764"),
        ("Namık Kemal", "34762"),
    ],
    "Üsküdar": [
        ("Kuzguncuk", "34674"),
        ("Beylerbeyi", "34676"),
        ("Çengelköy", "34680"),
        ("Altunizade", "34662"),
    ],
    "Zeytinburnu": [
        ("Kazlıçeşme", "34020"),
        ("Merkezefendi", "34015"),
    ],
}
