"""Static registry of grid modules, their fields and entity accessors.

The registry is the deployment-time seed for the ``display_fields`` table and
the single place where a module is bound to its SQLAlchemy model. Each field
gets one getter, built here once, so filtering and sorting never switch on
field names.
"""

from collections.abc import Mapping
from datetime import date
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Type

from gridengine.catalog.schemas import FieldDefinition, FieldType
from gridengine.entities.models import (
    Acquisition,
    Buyer,
    County,
    LetterAgreement,
    Operator,
    Referrer,
)
from gridengine.query.schemas import FilterCriterion

Getter = Callable[[Any], Any]


def make_getter(attribute: str) -> Getter:
    """Build an accessor that reads ``attribute`` from ORM rows or plain dicts."""

    def getter(entity: Any) -> Any:
        if isinstance(entity, Mapping):
            return entity.get(attribute)
        return getattr(entity, attribute, None)

    getter.__name__ = f"get_{attribute}"
    return getter


class FieldSpec:
    """Definition of a grid field bound to an entity attribute."""

    def __init__(
        self,
        field_name: str,
        label: str,
        field_type: FieldType,
        attribute: str,
    ):
        self.field_name = field_name
        self.label = label
        self.field_type = field_type
        self.attribute = attribute


def query_date(today: date) -> date:
    """Named filter value resolved to the date the query runs."""
    return today


class NamedFilter:
    """A preset filter offered by name.

    Criteria are ``(field_name, operator, value)`` triples. A callable value is
    called with the query date, so relative filters such as "due by today"
    are never frozen into a cache.
    """

    def __init__(self, name: str, criteria: Sequence[Tuple[str, str, Any]] = ()):
        self.name = name
        self.criteria = list(criteria)

    def resolve(self, today: date) -> List[FilterCriterion]:
        return [
            FilterCriterion(
                field_name=field_name,
                operator=operator,
                value=value(today) if callable(value) else value,
            )
            for field_name, operator, value in self.criteria
        ]


class EntityRegistration:
    """A module bound to its model, accessors and default sort."""

    def __init__(
        self,
        module: str,
        model: Type[Any],
        id_field: str,
        fields: Sequence[FieldSpec],
        default_sort: Sequence[Tuple[str, bool]],
        pages: Sequence[str] = (),
        named_filters: Sequence[NamedFilter] = (),
        preset_views: Sequence[Tuple[str, Sequence[str]]] = (),
    ):
        self.module = module
        self.model = model
        self.id_field = id_field
        self.fields: List[FieldSpec] = list(fields)
        # (field_name, descending) pairs applied when a request has no sort
        self.default_sort: List[Tuple[str, bool]] = list(default_sort)
        self.pages: List[str] = list(pages)
        self.named_filters: Dict[str, NamedFilter] = {f.name: f for f in named_filters}
        # (view_name, selected field names) seeded as stored views
        self.preset_views: List[Tuple[str, List[str]]] = [(name, list(names)) for name, names in preset_views]
        self.accessors: Dict[str, Getter] = {
            spec.field_name: make_getter(spec.attribute) for spec in self.fields
        }
        self.attributes: Dict[str, str] = {spec.field_name: spec.attribute for spec in self.fields}

    @property
    def id_attribute(self) -> str:
        return self.attributes[self.id_field]

    def named_filter(self, name: str) -> Optional[NamedFilter]:
        return self.named_filters.get(name)

    def field_definitions(self) -> List[FieldDefinition]:
        return [
            FieldDefinition(
                module=self.module,
                field_name=spec.field_name,
                label=spec.label,
                field_type=spec.field_type,
                display_order=index + 1,
            )
            for index, spec in enumerate(self.fields)
        ]

    def project(self, entity: Any, field_names: Optional[Sequence[str]] = None) -> Dict[str, Any]:
        """Map an entity onto ``field_name -> value`` for the requested fields."""
        names = field_names if field_names is not None else list(self.accessors)
        return {name: self.accessors[name](entity) for name in names}


# Entity Registry
ENTITY_REGISTRY: Dict[str, EntityRegistration] = {}
PAGE_MODULES: Dict[str, str] = {}


def register_entity(registration: EntityRegistration) -> None:
    """Register a module. Pages served by the module are registered with it."""
    ENTITY_REGISTRY[registration.module] = registration
    for page in registration.pages:
        PAGE_MODULES[page] = registration.module


def get_registration(module: str) -> Optional[EntityRegistration]:
    return ENTITY_REGISTRY.get(module)


def module_for_page(page_name: str) -> Optional[str]:
    return PAGE_MODULES.get(page_name)


def iter_field_seeds() -> Iterator[FieldDefinition]:
    for registration in ENTITY_REGISTRY.values():
        yield from registration.field_definitions()


def iter_preset_views() -> Iterator[Tuple[str, str, List[str]]]:
    """Yield ``(module, view_name, field_names)`` for every preset view."""
    for registration in ENTITY_REGISTRY.values():
        for view_name, field_names in registration.preset_views:
            yield registration.module, view_name, field_names


S, N, D, DT, B = (
    FieldType.STRING,
    FieldType.NUMBER,
    FieldType.DECIMAL,
    FieldType.DATE,
    FieldType.BOOLEAN,
)

register_entity(EntityRegistration(
    module="Acquisition",
    model=Acquisition,
    id_field="AcquisitionID",
    default_sort=[("AcquisitionID", True)],
    pages=["AcquisitionIndex"],
    fields=[
        FieldSpec("AcquisitionID", "Acquisition ID", N, "acquisition_id"),
        FieldSpec("AcquisitionNumber", "Acquisition Number", S, "acquisition_number"),
        FieldSpec("Buyer", "Buyer", S, "buyer"),
        FieldSpec("Assignee", "Assignee", S, "assignee"),
        FieldSpec("DealStatus", "Deal Status", S, "deal_status"),
        FieldSpec("CountyName", "County", S, "county_name"),
        FieldSpec("OperatorName", "Operator", S, "operator_name"),
        FieldSpec("TotalBonus", "Total Bonus", D, "total_bonus"),
        FieldSpec("ConsiderationFee", "Consideration Fee", D, "consideration_fee"),
        FieldSpec("TotalGrossAcres", "Total Gross Acres", D, "total_gross_acres"),
        FieldSpec("TotalNetAcres", "Total Net Acres", D, "total_net_acres"),
        FieldSpec("EffectiveDate", "Effective Date", DT, "effective_date"),
        FieldSpec("DueDate", "Due Date", DT, "due_date"),
        FieldSpec("PaidDate", "Paid Date", DT, "paid_date"),
        FieldSpec("ClosingDays", "Closing Days", N, "closing_days"),
        FieldSpec("Liens", "Liens", B, "liens"),
        FieldSpec("IsActive", "Is Active", B, "is_active"),
    ],
    named_filters=[
        NamedFilter("All Records"),
        NamedFilter("Pending Approval", [("DealStatus", "equals", "Pending")]),
        NamedFilter("Drafts Due", [("DueDate", "beforeOrEqual", query_date), ("PaidDate", "isNull", None)]),
        NamedFilter("With Liens", [("Liens", "isTrue", None)]),
    ],
    preset_views=[
        ("Summary View", ["AcquisitionID", "Buyer", "TotalBonus", "EffectiveDate"]),
        ("Financial View", ["AcquisitionID", "TotalBonus", "ConsiderationFee", "PaidDate"]),
        ("Title View", ["AcquisitionID", "DealStatus", "Liens"]),
        ("Acreage View", ["AcquisitionID", "TotalGrossAcres", "TotalNetAcres"]),
    ],
))

register_entity(EntityRegistration(
    module="LetterAgreement",
    model=LetterAgreement,
    id_field="LetterAgreementID",
    default_sort=[("LetterAgreementID", True)],
    pages=["LetterAgreementIndex"],
    fields=[
        FieldSpec("LetterAgreementID", "Letter Agreement ID", N, "letter_agreement_id"),
        FieldSpec("SellerLastName", "Seller Last Name", S, "seller_last_name"),
        FieldSpec("SellerName", "Seller Name", S, "seller_name"),
        FieldSpec("CreatedOn", "Created Date", DT, "created_on"),
        FieldSpec("EffectiveDate", "Effective Date", DT, "effective_date"),
        FieldSpec("BankingDays", "Banking Days", N, "banking_days"),
        FieldSpec("TotalBonus", "Total Bonus", D, "total_bonus"),
        FieldSpec("DealStatus", "Deal Status", S, "deal_status"),
        FieldSpec("CountyName", "County", S, "county_name"),
        FieldSpec("OperatorName", "Operator", S, "operator_name"),
        FieldSpec("LandMan", "Land Man", S, "land_man"),
        FieldSpec("AcquisitionID", "Acquisition ID", N, "acquisition_id"),
    ],
))

register_entity(EntityRegistration(
    module="Buyer",
    model=Buyer,
    id_field="BuyerID",
    default_sort=[("BuyerName", False)],
    pages=["BuyerIndex"],
    fields=[
        FieldSpec("BuyerID", "Buyer ID", N, "buyer_id"),
        FieldSpec("BuyerName", "Buyer Name", S, "buyer_name"),
        FieldSpec("DefaultBuyer", "Default Buyer", B, "default_buyer"),
        FieldSpec("DefaultCommission", "Default Commission", D, "default_commission"),
        FieldSpec("ContactName", "Contact Name", S, "contact_name"),
        FieldSpec("ContactEmail", "Contact Email", S, "contact_email"),
        FieldSpec("City", "City", S, "city"),
        FieldSpec("StateCode", "State", S, "state_code"),
        FieldSpec("ZipCode", "Zip Code", S, "zip_code"),
    ],
))

register_entity(EntityRegistration(
    module="Operator",
    model=Operator,
    id_field="OperatorID",
    default_sort=[("OperatorName", False)],
    pages=["OperatorIndex"],
    fields=[
        FieldSpec("OperatorID", "Operator ID", N, "operator_id"),
        FieldSpec("OperatorName", "Operator Name", S, "operator_name"),
        FieldSpec("ContactName", "Contact Name", S, "contact_name"),
        FieldSpec("ContactEmail", "Contact Email", S, "contact_email"),
        FieldSpec("ContactPhone", "Contact Phone", S, "contact_phone"),
        FieldSpec("City", "City", S, "city"),
        FieldSpec("StateCode", "State", S, "state_code"),
        FieldSpec("ZipCode", "Zip Code", S, "zip_code"),
    ],
))

register_entity(EntityRegistration(
    module="County",
    model=County,
    id_field="CountyID",
    default_sort=[("CountyName", False)],
    pages=["CountyIndex"],
    fields=[
        FieldSpec("CountyID", "County ID", N, "county_id"),
        FieldSpec("CountyName", "County Name", S, "county_name"),
        FieldSpec("StateCode", "State", S, "state_code"),
        FieldSpec("ContactName", "Contact Name", S, "contact_name"),
        FieldSpec("ContactEmail", "Contact Email", S, "contact_email"),
        FieldSpec("City", "City", S, "city"),
        FieldSpec("ZipCode", "Zip Code", S, "zip_code"),
    ],
))

register_entity(EntityRegistration(
    module="Referrer",
    model=Referrer,
    id_field="ReferrerID",
    default_sort=[("ReferrerName", False)],
    pages=["ReferrerIndex"],
    fields=[
        FieldSpec("ReferrerID", "Referrer ID", N, "referrer_id"),
        FieldSpec("ReferrerName", "Referrer Name", S, "referrer_name"),
        FieldSpec("ReferrerTaxID", "Tax ID", S, "referrer_tax_id"),
        FieldSpec("ContactName", "Contact Name", S, "contact_name"),
        FieldSpec("ContactEmail", "Contact Email", S, "contact_email"),
        FieldSpec("City", "City", S, "city"),
        FieldSpec("StateCode", "State", S, "state_code"),
        FieldSpec("ZipCode", "Zip Code", S, "zip_code"),
    ],
))
