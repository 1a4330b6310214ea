from .contracts import NearbyRestaurant, PlaceCreate

SEED_SOURCE = "Weekender sample data"


def sample_places() -> list[PlaceCreate]:
    """Starter destinations loaded by `POST /places/import`."""

    def r(name, description, distance=None):
        return NearbyRestaurant(name=name, description=description, distance=distance)

    sky_zone = PlaceCreate(
        name="Sky Zone Trampoline Park - South Plainfield",
        category="indoor",
        subcategory="Trampoline Park",
        indoor_outdoor="indoor",
        overview=(
            "Large indoor trampoline park with a dedicated Toddler Zone, open jump courts, "
            "foam pits, Air Court, and party rooms. Good option for a 5-year-old if you go "
            "during off-peak hours."
        ),
        address="600 Hadley Rd, South Plainfield, NJ 07080",
        google_maps_url=(
            "https://www.google.com/maps/place/Sky+Zone+Trampoline+Park,"
            "+600+Hadley+Rd,+South+Plainfield,+NJ+07080"
        ),
        distance_miles=9.5,
        drive_time_minutes=22,
        rating=3.8,
        kid_friendly=True,
        wheelchair_accessible=True,
        key_highlights=(
            "Toddler Zone designed for younger kids; Freestyle Jump; Foam Zone; Air Court; "
            "Family Slide/SkyHoops; birthday party packages"
        ),
        insider_tips=(
            "Go at opening on Tue-Thu to avoid big-kid crowds; skip GLOW for noise-sensitive "
            "kids. Pre-sign the online waiver and arrive 20 minutes early for wristbands."
        ),
        entry_fee="Varies by session; 60 min is about $25-$30 per jumper",
        best_seasons="Year-round; ideal for winter, rainy days, and very hot days",
        average_visit_duration="1.5-2 hours",
        source=SEED_SOURCE,
    )

    turtle_back = PlaceCreate(
        name="Turtle Back Zoo",
        category="animals",
        subcategory="Zoo",
        indoor_outdoor="outdoor",
        overview=(
            "Family-friendly zoo in West Orange with over 100 species including giraffes, "
            "penguins, and bears, plus a miniature train ride, a petting zoo, and a treetop "
            "adventure course."
        ),
        address="560 Northfield Ave, West Orange, NJ 07052",
        google_maps_url="https://www.google.com/maps/place/Turtle+Back+Zoo/@40.7678,-74.2855,17z",
        distance_miles=25,
        drive_time_minutes=35,
        rating=4.5,
        kid_friendly=True,
        wheelchair_accessible=True,
        key_highlights=(
            "Diverse animal exhibits, petting zoo and train ride, seasonal events such as "
            "Boo at the Zoo, playground areas for kids"
        ),
        insider_tips=(
            "Arrive early for parking close to the entrance; bring a stroller; check the "
            "feeding schedules online."
        ),
        entry_fee="Adults $17, children (2-12) $14, seniors $14, under 2 free",
        best_seasons="Spring and Fall for pleasant weather and fewer crowds",
        average_visit_duration="3-4 hours",
        nearby_restaurants=[
            r("The Juke Joint Soul Kitchen", "Family-friendly Southern comfort food", "10-minute drive"),
            r("Tito's Burritos & Wings", "Casual Mexican eatery, kid-friendly menu", "15-minute drive"),
        ],
        source=SEED_SOURCE,
    )

    liberty_science = PlaceCreate(
        name="Liberty Science Center",
        category="educational",
        subcategory="Science Center",
        indoor_outdoor="indoor",
        overview=(
            "Interactive science museum in Jersey City with hundreds of hands-on exhibits, "
            "live demonstrations, the largest planetarium in the Western Hemisphere, and play "
            "zones for younger visitors."
        ),
        address="222 Jersey City Blvd, Jersey City, NJ 07305",
        google_maps_url="https://www.google.com/maps/place/Liberty+Science+Center",
        distance_miles=37,
        drive_time_minutes=50,
        rating=4.5,
        kid_friendly=True,
        wheelchair_accessible=True,
        key_highlights=(
            "Jennifer Chalsty Planetarium, Wobbly World and I Explore zones, Touch Tunnel, "
            "Dino Dig, live animal exhibits"
        ),
        insider_tips="Arrive early to beat school groups and book planetarium times in advance.",
        entry_fee="About $30 per adult, $25 per child (2-12)",
        best_seasons="Year-round (indoor attraction). Fall and winter are best for fewer crowds",
        average_visit_duration="3-5 hours",
        nearby_restaurants=[
            r("Liberty House Restaurant", "Family-friendly dining with Manhattan skyline views"),
            r("Brownstone Diner & Pancake Factory", "Pancakes and breakfast all day"),
        ],
        source=SEED_SOURCE,
    )

    adventure_aquarium = PlaceCreate(
        name="Adventure Aquarium",
        category="animals",
        subcategory="Aquarium",
        indoor_outdoor="indoor",
        overview=(
            "Aquarium on the Camden waterfront with hippos, sharks, penguins, and interactive "
            "touch tanks."
        ),
        address="1 Riverside Dr, Camden, NJ 08103",
        google_maps_url="https://www.google.com/maps/place/Adventure+Aquarium",
        distance_miles=62,
        drive_time_minutes=75,
        rating=4.4,
        kid_friendly=True,
        wheelchair_accessible=True,
        key_highlights="Hippo Haven, Shark Bridge, penguin island, stingray touch tank",
        insider_tips="Buy tickets online and visit on weekday mornings for smaller crowds.",
        entry_fee="Adults $35, children (2-12) $25, under 2 free",
        best_seasons="Summer offers waterfront activities nearby",
        average_visit_duration="3-4 hours",
        source=SEED_SOURCE,
    )

    grounds_for_sculpture = PlaceCreate(
        name="Grounds For Sculpture",
        category="outdoor",
        subcategory="Sculpture Park",
        indoor_outdoor="both",
        overview=(
            "42-acre sculpture park and museum with contemporary sculptures set in landscaped "
            "gardens, indoor galleries, and outdoor installations."
        ),
        address="80 Sculptors Way, Hamilton, NJ 08619",
        google_maps_url="https://www.google.com/maps/place/Grounds+For+Sculpture",
        distance_miles=45,
        drive_time_minutes=55,
        rating=4.6,
        kid_friendly=True,
        key_highlights="270+ sculptures, themed gardens, family scavenger hunts",
        insider_tips="Wear comfortable walking shoes and pick up the family guide at the entrance.",
        entry_fee="Adults $20, children under 10 free, students and seniors $18",
        best_seasons="Spring (blooming gardens) and Fall (autumn colors)",
        average_visit_duration="2-3 hours",
        nearby_restaurants=[
            r("Rats Restaurant", "Fine dining on-site inspired by Monet's Giverny"),
            r("Van Gogh's Ear Cafe", "Casual cafe on-site with sandwiches and pastries"),
        ],
        source=SEED_SOURCE,
    )

    return [sky_zone, turtle_back, liberty_science, adventure_aquarium, grounds_for_sculpture]
