"""
Static provider catalog.

The catalog is an in-memory list of providers browsed while assembling an
event plan. It also seeds the database-backed vendor directory used by
collaborations.
"""

from typing import Any, Dict, Iterable, List, Optional

from plannora.models.provider import (
    CategorySummary,
    ContactInfo,
    Offer,
    Provider,
    ProviderCategory,
)

C = ProviderCategory


def _provider(
    provider_id: str,
    name: str,
    category: ProviderCategory,
    description: str,
    price: float,
    rating: float,
    offers: Iterable[Offer] = (),
    contact: Optional[ContactInfo] = None,
    long_description: Optional[str] = None,
) -> Provider:
    return Provider(
        id=provider_id,
        name=name,
        category=category,
        description=description,
        long_description=long_description,
        price=price,
        rating=rating,
        offers=list(offers),
        contact_info=contact,
    )


PROVIDERS: List[Provider] = [
    # Venues
    _provider(
        "venue-1", "Grand Ballroom", C.VENUE,
        "Elegant ballroom with capacity for up to 300 guests", 5000, 4.8,
        long_description=(
            "Soaring ceilings, crystal chandeliers and a spacious dance floor, "
            "with flexible seating and in-house lighting and sound."
        ),
        offers=[
            Offer(
                id="venue-1-basic", name="Basic Package",
                description="Venue rental for 8 hours with basic setup", price=5000,
                features=[
                    "8-hour venue rental",
                    "Basic tables and chairs setup",
                    "Cleaning service",
                    "Parking for up to 100 cars",
                ],
            ),
            Offer(
                id="venue-1-premium", name="Premium Package",
                description="Full-service venue rental with enhanced amenities", price=7500,
                features=[
                    "10-hour venue rental",
                    "Premium table settings and chairs",
                    "Dedicated event coordinator",
                    "Basic lighting package",
                    "Bridal suite access",
                    "Extended parking",
                ],
                popular=True,
            ),
            Offer(
                id="venue-1-complete", name="Complete Experience",
                description="All-inclusive luxury venue experience", price=10000,
                features=[
                    "12-hour venue rental",
                    "Luxury tables, linens, and chiavari chairs",
                    "Custom floor plan design",
                    "Advanced lighting package",
                    "Bridal and groom suite access",
                    "Complimentary champagne toast",
                    "Security personnel",
                    "Valet parking",
                ],
            ),
        ],
        contact=ContactInfo(
            phone="(555) 123-4567",
            email="events@grandballroom.com",
            website="www.grandballroom.com",
            address="123 Elegant Avenue, Cityville",
        ),
    ),
    _provider(
        "venue-2", "Seaside Resort", C.VENUE,
        "Beautiful beachfront venue with stunning ocean views", 7500, 4.9,
        offers=[
            Offer(
                id="venue-2-basic", name="Beach Ceremony",
                description="Intimate beach ceremony setup", price=5000,
                features=[
                    "Beachfront ceremony setup",
                    "White garden chairs",
                    "Bamboo arch",
                    "Sound system for ceremony",
                    "2-hour rental",
                ],
            ),
            Offer(
                id="venue-2-premium", name="Seaside Celebration",
                description="Ceremony and reception package", price=8500,
                features=[
                    "Beachfront ceremony setup",
                    "Reception in oceanview pavilion",
                    "Tables and chairs with linens",
                    "Basic decoration package",
                    "Sound system",
                    "6-hour rental",
                ],
                popular=True,
            ),
            Offer(
                id="venue-2-complete", name="Resort Buyout",
                description="Exclusive use of entire resort facilities", price=15000,
                features=[
                    "Exclusive access to entire resort",
                    "Multiple ceremony and reception locations",
                    "Luxury accommodation for couple",
                    "Custom setup and decoration",
                    "Full-day rental",
                ],
            ),
        ],
    ),
    _provider("venue-3", "Urban Loft", C.VENUE,
              "Modern industrial space in the heart of downtown", 3500, 4.6),
    _provider("venue-4", "Garden Paradise", C.VENUE,
              "Enchanting garden venue with lush greenery and fountains", 4500, 4.7),
    _provider("venue-5", "Historic Mansion", C.VENUE,
              "Elegant 19th century mansion with classic architecture", 6000, 4.5),
    _provider("venue-6", "Vineyard Estates", C.VENUE,
              "Picturesque vineyard with mountain views and wine tasting", 5800, 4.9),

    # Catering (per person)
    _provider(
        "catering-1", "Gourmet Delights", C.CATERING,
        "Fine dining experience with international cuisine options", 85, 4.7,
        offers=[
            Offer(
                id="catering-1-basic", name="Classic Menu",
                description="Traditional three-course plated dinner", price=75,
                features=[
                    "Choice of 2 appetizers",
                    "Choice of 3 main courses",
                    "Classic dessert selection",
                    "Coffee and tea service",
                    "Professional serving staff",
                ],
            ),
            Offer(
                id="catering-1-premium", name="Gourmet Experience",
                description="Premium four-course plated dinner", price=95,
                features=[
                    "Selection of passed hors d'oeuvres",
                    "Gourmet appetizer course",
                    "Premium entree options",
                    "Artisanal dessert station",
                    "Wine pairing recommendations",
                    "Full service staff",
                ],
                popular=True,
            ),
            Offer(
                id="catering-1-buffet", name="International Buffet",
                description="Global cuisine stations", price=85,
                features=[
                    "Multiple cuisine stations",
                    "Carving station",
                    "Made-to-order pasta station",
                    "Dessert display",
                    "Nonalcoholic beverage package",
                    "Staffed service",
                ],
            ),
            Offer(
                id="catering-1-cocktail", name="Cocktail Reception",
                description="Elegant passed appetizers and stations", price=65,
                features=[
                    "Selection of 8 passed hors d'oeuvres",
                    "2 food stations",
                    "Dessert bites",
                    "Professional serving staff",
                    "Chef attendant",
                ],
            ),
        ],
        contact=ContactInfo(
            phone="(555) 987-6543",
            email="events@gourmetdelights.com",
            website="www.gourmetdelights.com",
        ),
    ),
    _provider("catering-2", "Comfort Cuisine", C.CATERING,
              "Homestyle favorites with a gourmet twist", 65, 4.5),
    _provider("catering-3", "Global Tastes", C.CATERING,
              "Fusion cuisine featuring dishes from around the world", 75, 4.6),
    _provider("catering-4", "Farm to Table", C.CATERING,
              "Locally sourced organic ingredients with seasonal menu options", 95, 4.8),
    _provider("catering-5", "Mediterranean Feast", C.CATERING,
              "Authentic Mediterranean cuisine with mezze platters and kebabs", 80, 4.6),

    # Music
    _provider("music-1", "Classic Strings Quartet", C.MUSIC,
              "Elegant classical music performed by professional musicians", 1200, 4.8),
    _provider("music-2", "Party Rockers Band", C.MUSIC,
              "High-energy band covering top hits from all decades", 2500, 4.9),
    _provider("music-3", "DJ Mixtape", C.MUSIC,
              "Professional DJ with state-of-the-art equipment", 1000, 4.7),

    # Photography
    _provider("photo-1", "Moment Capturers", C.PHOTOGRAPHY,
              "Award-winning photography team specializing in candid moments", 2200, 4.8),
    _provider("photo-2", "Visual Storytellers", C.PHOTOGRAPHY,
              "Photography and videography package with drone footage", 3000, 4.9),
    _provider("photo-3", "Candid Captures", C.PHOTOGRAPHY,
              "Photojournalistic approach capturing natural moments and emotions", 2200, 4.8),

    # Decoration
    _provider("decor-1", "Elegant Arrangements", C.DECORATION,
              "Sophisticated decor tailored to your event theme", 1800, 4.7),
    _provider("decor-2", "Whimsical Designs", C.DECORATION,
              "Creative and playful decorations for a memorable event", 1500, 4.6),
    _provider("decor-3", "Botanical Bliss", C.DECORATION,
              "Natural and organic decoration themes with living plants and flowers", 1900, 4.7),

    # Transportation
    _provider("transport-1", "Luxury Limos", C.TRANSPORTATION,
              "Fleet of luxury vehicles with professional chauffeurs", 800, 4.5),
    _provider("transport-2", "Vintage Wheels", C.TRANSPORTATION,
              "Classic cars for a timeless entrance and exit", 1200, 4.8),
    _provider("transport-3", "Vintage Wheels", C.TRANSPORTATION,
              "Classic cars and vintage vehicles for a timeless arrival", 800, 4.9),

    # Lighting
    _provider("light-1", "Ambient Illumination", C.LIGHTING,
              "Customized lighting design to enhance your event atmosphere", 1200, 4.7),
    _provider("light-2", "Dynamic Light Show", C.LIGHTING,
              "Synchronized lighting effects for an unforgettable experience", 1800, 4.9),
    _provider("light-3", "Glow Effects", C.LIGHTING,
              "Dramatic lighting designs with color coordination and patterns", 1200, 4.6),

    # Entertainment
    _provider("entertain-1", "Magic Moments", C.ENTERTAINMENT,
              "Close-up magician to amaze and entertain your guests", 950, 4.8),
    _provider("entertain-2", "Carnival Fun", C.ENTERTAINMENT,
              "Interactive games and activities for all ages", 1500, 4.6),
    _provider("entertain-3", "Magic Moments", C.ENTERTAINMENT,
              "Close-up magic and illusions to amaze and delight your guests", 1100, 4.8),

    # Flowers
    _provider("flowers-1", "Blossoming Beauty", C.FLOWERS,
              "Custom floral arrangements designed for your specific event", 1400, 4.9),
    _provider("flowers-2", "Natural Elegance", C.FLOWERS,
              "Seasonal flowers arranged with a modern aesthetic", 1100, 4.7),
    _provider("flower-3", "Wild Blooms", C.FLOWERS,
              "Untamed, natural floral arrangements with seasonal wildflowers", 1300, 4.7),

    # Wedding planners
    _provider("planner-1", "Dream Day Planners", C.WEDDING_PLANNER,
              "Full-service wedding planning with 10+ years of experience", 3500, 4.9),
    _provider("planner-2", "Eventful Horizons", C.WEDDING_PLANNER,
              "Day-of coordination and partial planning services", 1800, 4.7),

    # Cake
    _provider("cake-1", "Sweet Creations", C.CAKE,
              "Custom designed cakes with gourmet flavors", 800, 4.8),
    _provider("cake-2", "Artisan Bakery", C.CAKE,
              "Hand-crafted wedding cakes with organic ingredients", 950, 4.9),

    # Videography
    _provider("video-1", "Cinematic Moments", C.VIDEOGRAPHY,
              "Cinematic wedding films with drone footage and 4K quality", 3200, 4.9),
    _provider("video-2", "Story Films", C.VIDEOGRAPHY,
              "Documentary-style wedding videos that tell your unique story", 2700, 4.7),

    # Bartending
    _provider("bar-1", "Craft Cocktails", C.BARTENDING,
              "Custom cocktail menu with professional bartenders", 1500, 4.6),
    _provider("bar-2", "Mobile Bar", C.BARTENDING,
              "Stylish mobile bar setup with signature drinks", 1800, 4.8),

    # Furniture rental
    _provider("furniture-1", "Elegant Settings", C.FURNITURE_RENTAL,
              "High-end furniture rentals for sophisticated events", 2500, 4.7),
    _provider("furniture-2", "Modern Rentals", C.FURNITURE_RENTAL,
              "Contemporary furniture and decor items for trendy events", 2200, 4.5),

    # Invitations
    _provider("invite-1", "Paper & Ink", C.INVITATION,
              "Custom letterpress invitations with premium papers", 800, 4.9),
    _provider("invite-2", "Digital Design", C.INVITATION,
              "Modern digital invitations with online RSVP management", 400, 4.6),

    # Officiants
    _provider("officiant-1", "Personalized Ceremonies", C.OFFICIANT,
              "Customized ceremony scripts for meaningful celebrations", 600, 4.9),
    _provider("officiant-2", "Interfaith Minister", C.OFFICIANT,
              "Ceremonies honoring multiple faith traditions and cultures", 750, 4.8),

    # Hair & makeup
    _provider("beauty-1", "Glamour Squad", C.HAIR_MAKEUP,
              "Full team for bridal party hair and makeup with trials", 2000, 4.9),
    _provider("beauty-2", "Natural Beauty", C.HAIR_MAKEUP,
              "Subtle, elegant looks using clean beauty products", 1800, 4.7),

    # Security
    _provider("security-1", "Elite Protection", C.SECURITY,
              "Professional security staff for venue and guest safety", 1200, 4.5),
    _provider("security-2", "Guardian Services", C.SECURITY,
              "Discreet security personnel with hospitality training", 900, 4.7),
    _provider("security-3", "Event Shield", C.SECURITY,
              "Comprehensive security solutions with crowd management experts", 1450, 4.8),

    # Sound system
    _provider("sound-1", "Crystal Clear Audio", C.SOUND_SYSTEM,
              "Premium sound equipment with professional technician", 1500, 4.8),
    _provider("sound-2", "Bass Masters", C.SOUND_SYSTEM,
              "High-powered sound systems ideal for large venues and dancing", 1700, 4.6),
    _provider("sound-3", "Acoustic Perfect", C.SOUND_SYSTEM,
              "Premium sound engineering optimized for speech and live music", 1350, 4.9),

    # Jewelry
    _provider("jewelry-1", "Precious Gems", C.JEWELRY,
              "Custom wedding jewelry and accessory rentals", 1000, 4.6),
    _provider("jewelry-2", "Bridal Sparkle", C.JEWELRY,
              "Custom bridal jewelry and accessories for the whole wedding party", 1200, 4.8),
    _provider("jewelry-3", "Heritage Gems", C.JEWELRY,
              "Antique and vintage jewelry rentals for a touch of history", 850, 4.5),

    # Special effects
    _provider("effects-1", "Wow Factor", C.SPECIAL_EFFECTS,
              "Fog, cold sparklers, and special lighting effects", 1800, 4.7),
    _provider("effects-2", "Fog Masters", C.SPECIAL_EFFECTS,
              "Atmospheric fog and haze effects with LED color enhancement", 1500, 4.6),
    _provider("effects-3", "Pyro Wonders", C.SPECIAL_EFFECTS,
              "Indoor fireworks and sparkler effects for dramatic moments", 2000, 4.9),

    # Childcare
    _provider("childcare-1", "Event Nannies", C.CHILDCARE,
              "Professional childcare with activities for kids at your event", 800, 4.8),
    _provider("childcare-2", "Kids Corner", C.CHILDCARE,
              "Dedicated children's entertainment and supervision with themed activities", 900, 4.9),
    _provider("childcare-3", "Little VIPs", C.CHILDCARE,
              "Premium childcare service with personalized care for each child", 1200, 4.7),

    # Photo booth
    _provider("booth-1", "Snap Happy", C.PHOTO_BOOTH,
              "Modern photo booth with instant prints and digital sharing", 900, 4.7),
    _provider("booth-2", "Vintage Booth", C.PHOTO_BOOTH,
              "Classic-style photo booth with custom backdrop options", 1100, 4.6),
]

_BY_ID: Dict[str, Provider] = {provider.id: provider for provider in PROVIDERS}


# ============================================================================
# Lookups
# ============================================================================


def get_provider(provider_id: str) -> Optional[Provider]:
    """Find a provider by id."""
    return _BY_ID.get(provider_id)


def list_providers(
    category: Optional[ProviderCategory] = None,
    search: Optional[str] = None,
) -> List[Provider]:
    """
    List catalog providers.

    Args:
        category: Only providers of this category
        search: Case-insensitive substring matched against name and description

    Returns:
        Matching providers in catalog order
    """
    providers: Iterable[Provider] = PROVIDERS
    if category is not None:
        providers = (p for p in providers if p.category == category)
    if search:
        needle = search.lower()
        providers = (
            p for p in providers
            if needle in p.name.lower() or needle in p.description.lower()
        )
    return list(providers)


def cheapest_price(category: ProviderCategory) -> Optional[float]:
    """Lowest base price in a category, or None when the category is empty."""
    prices = [p.price for p in PROVIDERS if p.category == category]
    return min(prices) if prices else None


def list_categories() -> List[CategorySummary]:
    """Every category that has at least one provider, with counts."""
    summaries = []
    for category in ProviderCategory:
        members = [p for p in PROVIDERS if p.category == category]
        if members:
            summaries.append(
                CategorySummary(
                    category=category,
                    count=len(members),
                    min_price=min(p.price for p in members),
                )
            )
    return summaries


# ============================================================================
# Vendor Directory Seed
# ============================================================================


def build_vendor_directory() -> List[Dict[str, Any]]:
    """
    Vendor directory documents derived from the catalog.

    Price ranges span the cheapest to the most expensive package (or the
    base price to 1.5x the base price when a provider has no packages).
    """
    vendors = []
    for provider in PROVIDERS:
        prices = [offer.price for offer in provider.offers] or [provider.price, provider.price * 1.5]
        low, high = int(min(prices)), int(max(prices))
        unit = " per person" if provider.is_per_person else ""
        contact = provider.contact_info or ContactInfo()
        vendors.append({
            "name": provider.name,
            "category": provider.category.value,
            "description": provider.description,
            "priceRange": f"${low} - ${high}{unit}",
            "rating": provider.rating,
            "location": contact.address or "",
            "email": contact.email,
            "phone": contact.phone,
            "website": contact.website,
            "services": [offer.name for offer in provider.offers],
            "isVerified": True,
            "images": [provider.image] if provider.image else [],
            "catalogId": provider.id,
        })
    return vendors
