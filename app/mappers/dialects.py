"""
app/mappers/dialects.py

Column-naming conventions ("dialects") found in developer price lists.

Each dialect is plain data: signature columns used for detection, header
aliases per source field, and the fields whose "X" marker means a sold unit.
Adding a dialect means adding one entry to ``DIALECTS``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Fields read from a source row. Besides the canonical record fields this
# includes ``total_price`` (a fallback source) and ``project_name`` (a
# target-naming hint).
SOURCE_FIELDS: tuple[str, ...] = (
    "unit_identifier",
    "property_type",
    "usable_area",
    "price_per_m2",
    "total_price",
    "base_price",
    "final_price",
    "price_valid_from",
    "base_price_valid_from",
    "final_price_valid_from",
    "region",
    "county",
    "municipality",
    "locality",
    "street",
    "building_number",
    "postal_code",
    "parking_type",
    "parking_designation",
    "parking_price",
    "parking_date",
    "storage_type",
    "storage_designation",
    "storage_price",
    "storage_date",
    "necessary_rights_type",
    "necessary_rights_description",
    "necessary_rights_price",
    "necessary_rights_date",
    "other_services_type",
    "other_services_price",
    "prospectus_url",
    "rooms",
    "floor",
    "status",
    "project_name",
)

DECIMAL_FIELDS: frozenset[str] = frozenset(
    {
        "usable_area",
        "price_per_m2",
        "total_price",
        "base_price",
        "final_price",
        "parking_price",
        "storage_price",
        "necessary_rights_price",
        "other_services_price",
    }
)

INTEGER_FIELDS: frozenset[str] = frozenset({"rooms", "floor"})

DATE_FIELDS: frozenset[str] = frozenset(
    {
        "price_valid_from",
        "base_price_valid_from",
        "final_price_valid_from",
        "parking_date",
        "storage_date",
        "necessary_rights_date",
    }
)

_INVESTMENT_LOCATION = "lokalizacji przedsięwzięcia deweloperskiego lub zadania inwestycyjnego"

GENERIC_ALIASES: dict[str, tuple[str, ...]] = {
    "unit_identifier": (
        "nr lokalu",
        "numer lokalu",
        "nr mieszkania",
        "numer mieszkania",
        "mieszkanie nr",
        "lokal",
        "mieszkanie",
        "property number",
        "apartment number",
        "apartment",
        "nr",
    ),
    "property_type": (
        "typ",
        "typ lokalu",
        "typ mieszkania",
        "rodzaj",
        "rodzaj lokalu",
        "rodzaj nieruchomości",
        "kategoria",
        "type",
    ),
    "usable_area": (
        "powierzchnia",
        "powierzchnia użytkowa",
        "powierzchnia m2",
        "metraż",
        "pow",
        "area",
        "size",
        "m2",
    ),
    "price_per_m2": (
        "cena za m2",
        "cena m2",
        "cena/m2",
        "cena za metr",
        "price per sqm",
    ),
    "total_price": (
        "cena całkowita",
        "cena",
        "cena brutto",
        "price",
    ),
    "base_price": ("cena bazowa",),
    "final_price": (
        "cena finalna",
        "cena końcowa",
        "cena ostateczna",
    ),
    "price_valid_from": (
        "data od",
        "obowiązuje od",
        "cena od",
        "data ceny",
        "valid from",
    ),
    "region": ("województwo", "woj", "voivodeship", "province"),
    "county": ("powiat", "district"),
    "municipality": ("gmina", "gm", "commune"),
    "locality": ("miejscowość", "miasto", "city", "town"),
    "street": ("ulica", "ul", "adres", "address"),
    "building_number": ("nr budynku", "numer budynku", "budynek", "house number"),
    "postal_code": ("kod pocztowy", "zip code", "zip"),
    "parking_type": ("rodzaj parkingu", "typ parkingu"),
    "parking_designation": (
        "miejsce parkingowe",
        "nr miejsca parkingowego",
        "parking",
        "parking space",
        "mp",
    ),
    "parking_price": ("cena parkingu", "cena garażu", "cena miejsca parkingowego"),
    "storage_designation": ("komórka lokatorska", "nr komórki", "komórka", "storage"),
    "storage_price": ("cena komórki", "cena komórki lokatorskiej"),
    "prospectus_url": ("prospekt", "adres prospektu", "prospekt informacyjny"),
    "rooms": ("pokoje", "liczba pokoi", "ilość pokoi", "pokoi"),
    "floor": ("piętro", "kondygnacja", "poziom", "level"),
    "status": (
        "dostępność",
        "status dostępności",
        "stan",
        "stan sprzedaży",
        "availability",
    ),
    "project_name": (
        "inwestycja",
        "nazwa inwestycji",
        "projekt",
        "osiedle",
        "project",
        "investment",
        "investment name",
    ),
}

MINISTERIAL_ALIASES: dict[str, tuple[str, ...]] = {
    "unit_identifier": (
        "nr lokalu lub domu jednorodzinnego nadany przez dewelopera",
        "oznaczenie lokalu nadane przez dewelopera",
    ),
    "property_type": ("rodzaj nieruchomości: lokal mieszkalny, dom jednorodzinny",),
    "price_per_m2": (
        "cena m 2 powierzchni użytkowej lokalu mieszkalnego / domu jednorodzinnego [zł]",
        "cena metra kwadratowego powierzchni użytkowej",
    ),
    "total_price": (
        "cena lokalu mieszkalnego lub domu jednorodzinnego będących przedmiotem umowy "
        "stanowiąca iloczyn ceny m2 oraz powierzchni [zł]",
        "cena będąca iloczynem powierzchni oraz metrażu",
    ),
    "final_price": (
        "cena lokalu mieszkalnego lub domu jednorodzinnego uwzględniająca cenę lokalu "
        "stanowiącą iloczyn powierzchni oraz metrażu i innych składowych ceny, o których "
        "mowa w art. 19a ust. 1 pkt 1), 2) lub 3) [zł]",
        "cena uwzględniająca wszystkie składowe",
    ),
    "price_valid_from": (
        "data od której cena obowiązuje cena m 2 powierzchni użytkowej lokalu mieszkalnego "
        "/ domu jednorodzinnego",
        "data od której cena obowiązuje",
    ),
    "base_price_valid_from": (
        "data od której obowiązuje cena lokalu mieszkalnego lub domu jednorodzinnego "
        "będących przedmiotem umowy",
    ),
    "final_price_valid_from": (
        "data od której obowiązuje cena lokalu mieszkalnego lub domu jednorodzinnego "
        "uwzględniająca cenę lokalu stanowiącą iloczyn powierzchni oraz metrażu i innych "
        "składowych ceny, o których mowa w art. 19a ust. 1 pkt 1), 2) lub 3)",
    ),
    "region": (f"województwo {_INVESTMENT_LOCATION}",),
    "county": (f"powiat {_INVESTMENT_LOCATION}",),
    "municipality": (f"gmina {_INVESTMENT_LOCATION}",),
    "locality": (f"miejscowość {_INVESTMENT_LOCATION}",),
    "street": (f"ulica {_INVESTMENT_LOCATION}",),
    "building_number": (f"nr nieruchomości {_INVESTMENT_LOCATION}",),
    "postal_code": (f"kod pocztowy {_INVESTMENT_LOCATION}",),
    "parking_type": ("rodzaj części nieruchomości będących przedmiotem umowy",),
    "parking_designation": (
        "oznaczenie części nieruchomości nadane przez dewelopera",
        "nr przypisanego miejsca parkingowego / garażu [1]",
    ),
    "parking_price": (
        "cena części nieruchomości, będących przedmiotem umowy [zł]",
        "cena przypisanego miejsca parkingowego / garażu [1]",
    ),
    "parking_date": (
        "data od której obowiązuje cena części nieruchomości, będących przedmiotem umowy",
    ),
    "storage_type": ("rodzaj pomieszczeń przynależnych",),
    "storage_designation": ("oznaczenie pomieszczeń przynależnych",),
    "storage_price": ("wyszczególnienie cen pomieszczeń przynależnych [zł]",),
    "storage_date": (
        "data od której obowiązuje cena wyszczególnionych pomieszczeń przynależnych",
    ),
    "necessary_rights_type": ("rodzaj praw niezbędnych do korzystania z lokalu",),
    "necessary_rights_description": (
        "wyszczególnienie praw niezbędnych do korzystania z lokalu mieszkalnego lub domu "
        "jednorodzinnego",
    ),
    "necessary_rights_price": (
        "wartość praw niezbędnych do korzystania z lokalu mieszkalnego lub domu "
        "jednorodzinnego [zł]",
    ),
    "necessary_rights_date": (
        "data od której obowiązuje cena wartości praw niezbędnych do korzystania z lokalu "
        "mieszkalnego lub domu jednorodzinnego",
    ),
    "other_services_type": ("wyszczególnienie rodzajów innych świadczeń pieniężnych",),
    "other_services_price": ("wartość innych świadczeń pieniężnych [zł]",),
    "prospectus_url": (
        "adres strony internetowej, pod którym dostępny jest prospekt informacyjny",
    ),
    "project_name": ("nazwa przedsięwzięcia deweloperskiego lub zadania inwestycyjnego",),
}

INPRO_ALIASES: dict[str, tuple[str, ...]] = {
    "unit_identifier": ("nr nieruchomości nadany przez dewelopera",),
    "property_type": ("rodzaj nieruchomości",),
    "price_per_m2": ("cena za m2 nieruchomości",),
    "total_price": ("cena nieruchomości",),
    "price_valid_from": ("data od której obowiązuje cena za m2 nieruchomości",),
    "base_price_valid_from": ("data od której obowiązuje cena nieruchomości",),
    "other_services_type": ("inne świadczenia pieniężne",),
    "prospectus_url": ("adres strony internetowej inwestycji",),
    "project_name": ("nazwa inwestycji",),
}


@dataclass(frozen=True)
class Dialect:
    """
    Declarative description of one column-naming convention.
    """

    name: str
    signature_columns: tuple[str, ...]
    aliases: dict[str, tuple[str, ...]] = field(default_factory=dict)
    sold_marker_fields: tuple[str, ...] = ()
    fuzzy_matching: bool = False

    def aliases_for(self, source_field: str) -> tuple[str, ...]:
        """
        Candidate headers for one field: own aliases first, then the shared ones.
        """

        return (
            *self.aliases.get(source_field, ()),
            source_field,
            *GENERIC_ALIASES.get(source_field, ()),
        )


MINISTERIAL = Dialect(
    name="ministerial",
    signature_columns=(
        "Nr lokalu lub domu jednorodzinnego nadany przez dewelopera",
        "Cena m 2 powierzchni użytkowej lokalu mieszkalnego / domu jednorodzinnego [zł]",
        "Cena lokalu mieszkalnego lub domu jednorodzinnego będących przedmiotem umowy "
        "stanowiąca iloczyn ceny m2 oraz powierzchni [zł]",
        "Nazwa dewelopera",
        "Forma prawna dewelopera",
        "Rodzaj nieruchomości: lokal mieszkalny, dom jednorodzinny",
    ),
    aliases=MINISTERIAL_ALIASES,
    sold_marker_fields=("price_per_m2", "total_price", "final_price"),
)

INPRO = Dialect(
    name="inpro",
    signature_columns=(
        "Id nieruchomości",
        "Adres strony internetowej dewelopera",
        "Adres strony internetowej inwestycji",
        "Nr nieruchomości nadany przez dewelopera",
        "Inne świadczenia pieniężne",
        "Data od której obowiązuje cena za m2 nieruchomości",
        "Data od której obowiązuje cena nieruchomości",
    ),
    aliases=INPRO_ALIASES,
    sold_marker_fields=("price_per_m2", "total_price"),
)

GENERIC = Dialect(
    name="generic",
    signature_columns=(
        "nr lokalu",
        "numer lokalu",
        "apartment",
        "powierzchnia",
        "area",
        "metraz",
        "cena",
        "price",
        "cena całkowita",
        "status",
        "dostępność",
        "availability",
    ),
    fuzzy_matching=True,
)

# Most specific first; classification ties resolve in this order.
DIALECTS: tuple[Dialect, ...] = (MINISTERIAL, INPRO, GENERIC)

DIALECTS_BY_NAME: dict[str, Dialect] = {dialect.name: dialect for dialect in DIALECTS}
