"""Canonical field registry for container tracking data."""

from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from .formats.transforms import clean_text, parse_currency, parse_date, parse_number

FormatType = Literal["text", "date", "currency", "number", "reference", "port"]
Priority = Literal["critical", "high", "medium", "low"]


@dataclass(frozen=True)
class FieldDefinition:
    """A canonical field and the header aliases known to mean it."""

    name: str
    label: str
    format_type: FormatType
    priority: Priority
    aliases: tuple[str, ...] = field(default_factory=tuple)


# Declaration order is the tie-break order when two fields are equally likely.
FIELD_REGISTRY: tuple[FieldDefinition, ...] = (
    # Critical
    FieldDefinition(
        "container_number", "Container Number", "reference", "critical",
        ("container", "container number", "container #", "containernumber", "cntr", "container no"),
    ),
    FieldDefinition(
        "last_free_day", "Last Free Day", "date", "critical",
        ("lfd", "last free day", "free time expiry", "demurrage start"),
    ),
    # Dates
    FieldDefinition(
        "departure_date", "Actual Departure", "date", "high",
        ("actual departure", "atd", "actual departure (atd)", "actual departure date", "sailed date"),
    ),
    FieldDefinition(
        "port_arrival_date", "Actual Arrival", "date", "high",
        ("actual arrival", "ata", "confirmed destination port arrival (ata)", "confirmed destination (ata)"),
    ),
    FieldDefinition(
        "estimated_arrival_pod", "Estimated Arrival", "date", "high",
        ("eta", "estimated arrival", "expected arrival"),
    ),
    FieldDefinition(
        "booking_date", "Booking Date", "date", "high",
        ("booking date", "booked date"),
    ),
    FieldDefinition(
        "gate_out_date", "Gate Out Date", "date", "high",
        ("gate out", "gateout", "actual gateout date", "gate out date"),
    ),
    FieldDefinition(
        "empty_return_date", "Empty Return Date", "date", "medium",
        ("empty return", "empty return date", "container return"),
    ),
    FieldDefinition(
        "actual_delivery_date", "Delivery Date", "date", "medium",
        ("delivery date", "actual delivery", "delivered date"),
    ),
    FieldDefinition(
        "final_destination_eta", "Final Destination ETA", "date", "low",
        ("final destination eta", "door eta"),
    ),
    FieldDefinition(
        "pickup_appointment", "Pickup Appointment", "date", "low",
        ("pickup appointment", "pickup appt"),
    ),
    # Status
    FieldDefinition(
        "event_status", "Current Status", "text", "high",
        ("status", "current status", "milestone", "last event"),
    ),
    FieldDefinition(
        "event_date", "Status Date", "date", "medium",
        ("status date", "event date", "last event date"),
    ),
    FieldDefinition(
        "event_location", "Status Location", "text", "low",
        ("event location", "current location", "last location"),
    ),
    # Business
    FieldDefinition(
        "business_unit", "Business Unit", "text", "high",
        ("business unit", "businessunit", "bu", "division", "department"),
    ),
    FieldDefinition(
        "shipper", "Shipper", "text", "high",
        ("shipper", "shipper name", "shipper's full name", "shippers full name", "ship from"),
    ),
    FieldDefinition(
        "consignee", "Consignee", "text", "high",
        ("consignee", "consignee name", "consignee's full name", "consignee's full name (ship to)", "ship to name"),
    ),
    # Locations
    FieldDefinition(
        "pol", "Origin Port", "port", "high",
        ("pol", "port of loading", "origin port", "load port", "export departure port"),
    ),
    FieldDefinition(
        "pod", "Destination Port", "port", "high",
        ("pod", "port of discharge", "port of destination", "destination port", "port of unlading"),
    ),
    FieldDefinition(
        "destination_city", "Destination City", "text", "high",
        ("ship to city", "destination city", "delivery city", "dest city"),
    ),
    # References
    FieldDefinition(
        "shipment_reference", "House Bill", "reference", "medium",
        ("house bill", "hbl", "shipment / house bill", "shipment reference", "hawb"),
    ),
    FieldDefinition(
        "mbl", "Master Bill", "reference", "medium",
        ("master bill", "mbl", "masterbillnumber", "master bill number", "mawb"),
    ),
    FieldDefinition(
        "carrier", "Carrier", "text", "medium",
        ("carrier", "scac", "carrier code", "carrier code (scac) - shipping line", "shipping line"),
    ),
    FieldDefinition("forwarder", "Forwarder", "text", "low", ("forwarder", "freight forwarder")),
    FieldDefinition("vessel", "Vessel", "text", "low", ("vessel", "vessel name")),
    FieldDefinition("voyage", "Voyage", "reference", "low", ("voyage", "voyage number", "voy")),
    FieldDefinition("seal_number", "Seal Number", "reference", "low", ("seal", "seal number", "seal #")),
    # Financial
    FieldDefinition(
        "freight_cost", "Freight Cost", "currency", "medium",
        ("freight cost", "ocean freight", "ocean freight costs", "freight charges"),
    ),
    # Cargo
    FieldDefinition(
        "volume", "Volume", "number", "medium",
        ("volume", "shipment volume", "cbm", "m3", "shipment volume (m3)"),
    ),
    FieldDefinition(
        "weight", "Weight", "number", "medium",
        ("weight", "gross weight", "actual weight", "shipment actual weight (kg)"),
    ),
    FieldDefinition(
        "pieces", "Pieces", "number", "medium",
        ("pieces", "pallets", "cartons", "shipment pieces (pallets)"),
    ),
    # Container details
    FieldDefinition(
        "container_type", "Container Type", "text", "low",
        ("container type", "equipment type", "container size"),
    ),
    FieldDefinition(
        "transport_mode", "Transport Mode", "text", "low",
        ("transport mode", "mode", "shipping mode"),
    ),
    FieldDefinition(
        "shipping_type", "Shipping Type", "text", "low",
        ("shipping type", "fcl/lcl", "load type"),
    ),
    FieldDefinition("notes", "Notes", "text", "low", ("notes", "remarks", "comments", "memo")),
)

CANONICAL_FIELDS: tuple[str, ...] = tuple(d.name for d in FIELD_REGISTRY)

_BY_NAME = {d.name: d for d in FIELD_REGISTRY}
_ORDER = {d.name: i for i, d in enumerate(FIELD_REGISTRY)}


def is_canonical(name: Optional[str]) -> bool:
    """Check whether a name is a registered canonical field."""
    return bool(name) and name in _BY_NAME


def field_order(name: str) -> int:
    """Declaration index of a canonical field; unknown fields sort last."""
    return _ORDER.get(name, len(_ORDER))


def find_field(name: str) -> Optional[FieldDefinition]:
    """Find a field definition by canonical name, label, or exact alias."""
    key = (name or "").lower().strip()
    if not key:
        return None
    for definition in FIELD_REGISTRY:
        if key == definition.name or key == definition.label.lower() or key in definition.aliases:
            return definition
    return None


def coerce_value(field_name: str, value: Any) -> Any:
    """Coerce a raw cell according to the field's format type."""
    definition = _BY_NAME.get(field_name)
    if definition is None:
        return clean_text(value) if isinstance(value, str) else value

    if definition.format_type == "date":
        return parse_date(value)
    if definition.format_type == "currency":
        return parse_currency(value)
    if definition.format_type == "number":
        return parse_number(value)
    return clean_text(value)
