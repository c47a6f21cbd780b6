from dataclasses import dataclass
from typing import Optional, Tuple, Dict, Any

UNKNOWN_REGISTRAR = "Unknown"


@dataclass(frozen=True)
class RegistrationRecord:
    """Normalized WHOIS registration data for one domain."""
    registrar: str = UNKNOWN_REGISTRAR
    creation_date: Optional[str] = None
    expiration_date: Optional[str] = None
    updated_date: Optional[str] = None
    name_servers: Tuple[str, ...] = ()
    registrant_email: Optional[str] = None
    registrant_org: Optional[str] = None
    registrant_country: Optional[str] = None

    @property
    def has_registrar(self) -> bool:
        return bool(self.registrar) and self.registrar != UNKNOWN_REGISTRAR

    def to_dict(self) -> Dict[str, Any]:
        return {
            "registrar": self.registrar,
            "registrationDate": self.creation_date,
            "expirationDate": self.expiration_date,
            "updatedDate": self.updated_date,
            "nameServers": list(self.name_servers),
            "registrantEmail": self.registrant_email,
            "registrantOrg": self.registrant_org,
            "registrantCountry": self.registrant_country,
        }
