from __future__ import annotations

"""Domain value objects for remote user records and listing pages.

Adapters decode wire payloads into these frozen dataclasses, the bookmark
store persists them through ``to_payload``, and view models read the derived
display properties.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union


def _require_mapping(payload: Any, label: str) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise TypeError(f"{label} payload must be a mapping.")
    return payload


def _text(payload: Mapping[str, Any], key: str) -> str:
    """Read a required string field; numbers are accepted and stringified."""
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise TypeError(f"Field '{key}' must be a string.")
    return value if isinstance(value, str) else str(value)


def _optional_text(payload: Mapping[str, Any], key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise TypeError(f"Field '{key}' must be a string or null.")
    return value if isinstance(value, str) else str(value)


def _integer(payload: Mapping[str, Any], key: str) -> int:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Field '{key}' must be an integer.")
    return value


@dataclass(frozen=True)
class Postcode:
    """Postcode that arrives either as a JSON string or a JSON integer."""

    raw: Union[str, int]
    """Wire value preserved verbatim so re-encoding keeps its JSON type."""

    def __post_init__(self) -> None:
        if isinstance(self.raw, bool) or not isinstance(self.raw, (str, int)):
            raise TypeError("Postcode must be either a string or an integer.")

    @classmethod
    def from_payload(cls, value: Any) -> "Postcode":
        # Trial decoding: string first, integer second, anything else fails.
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        raise TypeError("Postcode must be either a string or an integer.")

    @property
    def is_numeric(self) -> bool:
        return isinstance(self.raw, int)

    @property
    def value(self) -> str:
        """Normalized string form regardless of the wire type."""
        return self.raw if isinstance(self.raw, str) else str(self.raw)

    def to_payload(self) -> Union[str, int]:
        return self.raw

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Name:
    title: str
    first: str
    last: str

    @classmethod
    def from_payload(cls, payload: Any) -> "Name":
        data = _require_mapping(payload, "name")
        return cls(title=_text(data, "title"), first=_text(data, "first"), last=_text(data, "last"))

    def to_payload(self) -> Dict[str, Any]:
        return {"title": self.title, "first": self.first, "last": self.last}


@dataclass(frozen=True)
class Street:
    number: int
    name: str

    @classmethod
    def from_payload(cls, payload: Any) -> "Street":
        data = _require_mapping(payload, "street")
        return cls(number=_integer(data, "number"), name=_text(data, "name"))

    def to_payload(self) -> Dict[str, Any]:
        return {"number": self.number, "name": self.name}


@dataclass(frozen=True)
class Coordinates:
    latitude: str
    longitude: str

    @classmethod
    def from_payload(cls, payload: Any) -> "Coordinates":
        data = _require_mapping(payload, "coordinates")
        return cls(latitude=_text(data, "latitude"), longitude=_text(data, "longitude"))

    def to_payload(self) -> Dict[str, Any]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class Timezone:
    offset: str
    description: str

    @classmethod
    def from_payload(cls, payload: Any) -> "Timezone":
        data = _require_mapping(payload, "timezone")
        return cls(offset=_text(data, "offset"), description=_text(data, "description"))

    def to_payload(self) -> Dict[str, Any]:
        return {"offset": self.offset, "description": self.description}


@dataclass(frozen=True)
class Location:
    """Structured postal location of a user."""

    street: Street
    city: str
    state: str
    country: str
    postcode: Postcode
    coordinates: Coordinates
    timezone: Timezone

    @classmethod
    def from_payload(cls, payload: Any) -> "Location":
        data = _require_mapping(payload, "location")
        return cls(
            street=Street.from_payload(data["street"]),
            city=_text(data, "city"),
            state=_text(data, "state"),
            country=_text(data, "country"),
            postcode=Postcode.from_payload(data["postcode"]),
            coordinates=Coordinates.from_payload(data["coordinates"]),
            timezone=Timezone.from_payload(data["timezone"]),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "street": self.street.to_payload(),
            "city": self.city,
            "state": self.state,
            "country": self.country,
            "postcode": self.postcode.to_payload(),
            "coordinates": self.coordinates.to_payload(),
            "timezone": self.timezone.to_payload(),
        }


@dataclass(frozen=True)
class Login:
    """Login credentials block; hashes are opaque strings from the API."""

    uuid: str
    username: str
    password: str
    salt: str
    md5: str
    sha1: str
    sha256: str

    @classmethod
    def from_payload(cls, payload: Any) -> "Login":
        data = _require_mapping(payload, "login")
        return cls(
            uuid=_text(data, "uuid"),
            username=_text(data, "username"),
            password=_text(data, "password"),
            salt=_text(data, "salt"),
            md5=_text(data, "md5"),
            sha1=_text(data, "sha1"),
            sha256=_text(data, "sha256"),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "uuid": self.uuid,
            "username": self.username,
            "password": self.password,
            "salt": self.salt,
            "md5": self.md5,
            "sha1": self.sha1,
            "sha256": self.sha256,
        }


@dataclass(frozen=True)
class DatedAge:
    """ISO date string paired with the age in years (``dob``/``registered``)."""

    date: str
    age: int

    @classmethod
    def from_payload(cls, payload: Any) -> "DatedAge":
        data = _require_mapping(payload, "date")
        return cls(date=_text(data, "date"), age=_integer(data, "age"))

    def to_payload(self) -> Dict[str, Any]:
        return {"date": self.date, "age": self.age}


@dataclass(frozen=True)
class UserIdent:
    """Structural id from the API; either part may be null."""

    name: Optional[str] = None
    value: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "UserIdent":
        if payload is None:
            return cls()
        data = _require_mapping(payload, "id")
        return cls(name=_optional_text(data, "name"), value=_optional_text(data, "value"))

    def to_payload(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class Picture:
    large: str
    medium: str
    thumbnail: str

    @classmethod
    def from_payload(cls, payload: Any) -> "Picture":
        data = _require_mapping(payload, "picture")
        return cls(
            large=_text(data, "large"),
            medium=_text(data, "medium"),
            thumbnail=_text(data, "thumbnail"),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {"large": self.large, "medium": self.medium, "thumbnail": self.thumbnail}


@dataclass(frozen=True, eq=False)
class UserRecord:
    """Immutable user record as served by the listing endpoint.

    Equality and hashing go through ``unique_id`` (email plus login
    username); the structural ``id`` field is unreliable and never used as a
    key.
    """

    gender: str
    name: Name
    location: Location
    email: str
    login: Login
    dob: DatedAge
    registered: DatedAge
    phone: str
    cell: str
    id: UserIdent
    picture: Picture
    nat: str

    @property
    def unique_id(self) -> str:
        return f"{self.email}_{self.login.username}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UserRecord):
            return NotImplemented
        return self.unique_id == other.unique_id

    def __hash__(self) -> int:
        return hash(self.unique_id)

    # ------------------------------------------------------------------
    # Derived display values
    # ------------------------------------------------------------------
    @property
    def full_name(self) -> str:
        return f"{self.name.title} {self.name.first} {self.name.last}"

    @property
    def display_name(self) -> str:
        return f"{self.name.first} {self.name.last}"

    @property
    def initials(self) -> str:
        return f"{self.name.first[:1]}{self.name.last[:1]}"

    @property
    def full_address(self) -> str:
        loc = self.location
        return (
            f"{loc.street.number} {loc.street.name}, {loc.city}, {loc.state}, "
            f"{loc.country}, {loc.postcode.value}"
        )

    @property
    def age(self) -> int:
        return self.dob.age

    def matches(self, query: str) -> bool:
        """Case-insensitive substring match on name, email, city or country."""
        needle = query.lower()
        haystacks = (
            self.full_name,
            self.email,
            self.location.city,
            self.location.country,
        )
        return any(needle in text.lower() for text in haystacks)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    @classmethod
    def from_payload(cls, payload: Any) -> "UserRecord":
        """Decode one user object of the listing response.

        Raises:
            KeyError: A required field is missing.
            TypeError: A field has the wrong JSON type.
        """
        data = _require_mapping(payload, "user")
        return cls(
            gender=_text(data, "gender"),
            name=Name.from_payload(data["name"]),
            location=Location.from_payload(data["location"]),
            email=_text(data, "email"),
            login=Login.from_payload(data["login"]),
            dob=DatedAge.from_payload(data["dob"]),
            registered=DatedAge.from_payload(data["registered"]),
            phone=_text(data, "phone"),
            cell=_text(data, "cell"),
            id=UserIdent.from_payload(data.get("id")),
            picture=Picture.from_payload(data["picture"]),
            nat=_text(data, "nat"),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "gender": self.gender,
            "name": self.name.to_payload(),
            "location": self.location.to_payload(),
            "email": self.email,
            "login": self.login.to_payload(),
            "dob": self.dob.to_payload(),
            "registered": self.registered.to_payload(),
            "phone": self.phone,
            "cell": self.cell,
            "id": self.id.to_payload(),
            "picture": self.picture.to_payload(),
            "nat": self.nat,
        }


@dataclass(frozen=True)
class PageInfo:
    """``info`` block of the listing response."""

    seed: str
    results: int
    page: int
    version: str

    @classmethod
    def from_payload(cls, payload: Any) -> "PageInfo":
        data = _require_mapping(payload, "info")
        return cls(
            seed=_text(data, "seed"),
            results=_integer(data, "results"),
            page=_integer(data, "page"),
            version=_text(data, "version"),
        )


@dataclass(frozen=True)
class Page:
    """One page of user records plus the metadata of the request/response."""

    users: Tuple[UserRecord, ...]
    info: PageInfo
    page_number: int
    requested_count: int

    @property
    def seed(self) -> str:
        return self.info.seed

    def __len__(self) -> int:
        return len(self.users)

    @classmethod
    def from_payload(
        cls,
        payload: Any,
        *,
        page_number: int,
        requested_count: int,
    ) -> "Page":
        data = _require_mapping(payload, "response")
        results = data["results"]
        if not isinstance(results, list):
            raise TypeError("Field 'results' must be a list.")
        users = tuple(UserRecord.from_payload(item) for item in results)
        return cls(
            users=users,
            info=PageInfo.from_payload(data["info"]),
            page_number=page_number,
            requested_count=requested_count,
        )


__all__ = [
    "Coordinates",
    "DatedAge",
    "Location",
    "Login",
    "Name",
    "Page",
    "PageInfo",
    "Picture",
    "Postcode",
    "Street",
    "Timezone",
    "UserIdent",
    "UserRecord",
]
