"""HVAC service catalog used to pre-fill job titles and descriptions."""

from typing import Dict, NamedTuple, Optional


class ServiceType(NamedTuple):
	code: str
	label: str
	default_title: str
	default_description: str


SERVICE_CATALOG: Dict[str, ServiceType] = {
	s.code: s
	for s in (
		ServiceType(
			"AC_INSTALL",
			"Air conditioning installation",
			"Air conditioning installation",
			"Installation of an air conditioning unit including commissioning.",
		),
		ServiceType(
			"AC_SERVICE",
			"Air conditioning service",
			"Air conditioning service",
			"Cleaning, leak check and functional test.",
		),
		ServiceType(
			"HP_INSTALL",
			"Heat pump installation",
			"Heat pump installation",
			"Installation and configuration of a heat pump.",
		),
		ServiceType(
			"HP_SERVICE",
			"Heat pump service",
			"Heat pump service",
			"Technical inspection and diagnostics of a heat pump.",
		),
		ServiceType(
			"HVAC_INSPECTION",
			"Periodic HVAC inspection",
			"HVAC installation inspection",
			"Periodic inspection of the whole HVAC system.",
		),
		ServiceType(
			"EMERGENCY",
			"Breakdown / urgent service",
			"Breakdown - urgent service",
			"Breakdown report requiring urgent intervention.",
		),
	)
}


def get_service_type(code: str) -> Optional[ServiceType]:
	return SERVICE_CATALOG.get(code.strip().upper())
