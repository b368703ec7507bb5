"""Catalogue of verified carrier export layouts."""

from .models import KnownFormatDefinition
from .transforms import parse_currency, parse_date, parse_number

STANDARD_CONTAINER_EXPORT = KnownFormatDefinition(
    id="standard_container_export_v1",
    name="Standard Container Export",
    description="Business Unit, shipment parties and full logistics milestones per container",
    required_headers=(
        "Business Unit",
        "ContainerNumber",
        "Shipper's Full Name",
        "Ship to City",
        # Matches both "Actual Departure (ATD)" and "Actual Departure Date"
        "Actual Departure",
    ),
    column_mapping={
        # Business & reference
        "Business Unit": "business_unit",
        "BusinessUnit": "business_unit",
        "Shipment / House Bill": "shipment_reference",
        "House Bill": "shipment_reference",
        "MasterBillNumber": "mbl",
        "Master Bill": "mbl",
        "ContainerNumber": "container_number",
        "Container #": "container_number",
        "Notes": "notes",
        # Container details
        "Container Type (20GP,40GP,40HC)": "container_type",
        "Container Type (20GP, 40HC, 40HQ)": "container_type",
        "Container Type": "container_type",
        "Transport Mode (Ocean, Air, Ground)": "transport_mode",
        "Shipping Type (FCL, LCL, Air)": "shipping_type",
        "Carrier Code (SCAC) - shipping line": "carrier",
        "Carrier": "carrier",
        # Parties
        "Shipper's Full Name": "shipper",
        "Consignee's Full Name (Ship To)": "consignee",
        "Consignee's Full Name": "consignee",
        "Consigne's Full Name (Ship To)": "consignee",
        # Locations
        "Ship to City": "destination_city",
        "Export Departure Port": "pol",
        "Port of Unlading": "pod",
        "Port of Destination": "pod",
        # Dates
        "Booking Date": "booking_date",
        "Actual Departure (ATD)": "departure_date",
        "Actual Departure Date": "departure_date",
        "Confirmed Destination Port Arrival (ATA)": "port_arrival_date",
        "Confirmed Destination (ATA)": "port_arrival_date",
        "Actual Gateout Date": "gate_out_date",
        "Empty Return Date": "empty_return_date",
        "Last Free Day": "last_free_day",
        # Cargo
        "Shipment Pieces (Pallets)": "pieces",
        "Shipment Volume (M3)": "volume",
        "Shipment Actual Weight (KG's)": "weight",
        "Shipment Actual Weight (KG)": "weight",
        "Shipment Actual Weight (KGS)": "weight",
        # Financial
        "OCEAN FREIGHT COSTS": "freight_cost",
    },
    transformations={
        "booking_date": parse_date,
        "departure_date": parse_date,
        "port_arrival_date": parse_date,
        "gate_out_date": parse_date,
        "empty_return_date": parse_date,
        "last_free_day": parse_date,
        "freight_cost": parse_currency,
        "weight": parse_number,
        "volume": parse_number,
        "pieces": parse_number,
    },
)

KNOWN_FORMATS: tuple[KnownFormatDefinition, ...] = (STANDARD_CONTAINER_EXPORT,)
