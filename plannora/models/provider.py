"""
Provider catalog schemas.

Providers are the static, bookable service entries used while planning an
event. Each provider may offer several packages.
"""

from enum import Enum
from typing import List, Optional

from pydantic import Field

from plannora.models.common import CamelModel


class ProviderCategory(str, Enum):
    """Service categories offered by providers."""
    VENUE = "Venue"
    CATERING = "Catering"
    MUSIC = "Music"
    PHOTOGRAPHY = "Photography"
    DECORATION = "Decoration"
    TRANSPORTATION = "Transportation"
    LIGHTING = "Lighting"
    ENTERTAINMENT = "Entertainment"
    FLOWERS = "Flowers"
    CAKE = "Cake"
    WEDDING_PLANNER = "Wedding Planner"
    VIDEOGRAPHY = "Videography"
    BARTENDING = "Bartending"
    FURNITURE_RENTAL = "Furniture Rental"
    INVITATION = "Invitation"
    OFFICIANT = "Officiant"
    HAIR_MAKEUP = "Hair & Makeup"
    SECURITY = "Security"
    SOUND_SYSTEM = "Sound System"
    JEWELRY = "Jewelry"
    SPECIAL_EFFECTS = "Special Effects"
    CHILDCARE = "Childcare"
    PHOTO_BOOTH = "Photo Booth"


# Categories priced per guest rather than per event.
PER_PERSON_CATEGORIES = frozenset({ProviderCategory.CATERING})


class Offer(CamelModel):
    """A package offered by a provider."""

    id: str
    name: str
    description: str = ""
    price: float = Field(..., ge=0)
    features: List[str] = Field(default_factory=list)
    popular: bool = False


class ContactInfo(CamelModel):
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None


class Provider(CamelModel):
    """Catalog entry."""

    id: str
    name: str
    category: ProviderCategory
    description: str = ""
    long_description: Optional[str] = None
    price: float = Field(..., ge=0, description="Base price (per person for catering)")
    rating: float = Field(..., ge=0, le=5)
    image: Optional[str] = None
    offers: List[Offer] = Field(default_factory=list)
    contact_info: Optional[ContactInfo] = None

    @property
    def is_per_person(self) -> bool:
        return self.category in PER_PERSON_CATEGORIES

    def get_offer(self, offer_id: Optional[str]) -> Optional[Offer]:
        """
        Resolve an offer by id.

        Providers without packages expose their base price as an implicit
        "Standard Package" so every selection carries an offer.
        """
        offers = self.offers or [
            Offer(
                id=f"{self.id}-standard",
                name="Standard Package",
                description=self.description,
                price=self.price,
            )
        ]
        if offer_id is None:
            return offers[0]
        return next((offer for offer in offers if offer.id == offer_id), None)


class CategorySummary(CamelModel):
    """Category listing entry."""

    category: ProviderCategory
    count: int
    min_price: float
