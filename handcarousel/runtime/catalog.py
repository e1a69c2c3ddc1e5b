from __future__ import annotations

from handcarousel.core.types import CarouselItem, Eligibility

# Playground experiments shown on the carousel
PLAYGROUND_ITEMS = (
    CarouselItem(
        id="christmas-gallery",
        title="AI Magic Gallery",
        description="Immersive particle Christmas tree with gesture and wish interaction.",
        eligibility=Eligibility.SELECTABLE,
        activation_target="/aihome/playground/christmas-tree",
    ),
    CarouselItem(
        id="ai-teacher",
        title="AI Teacher",
        description="Personalised tutoring assistant.",
    ),
    CarouselItem(
        id="ai-storybook",
        title="AI Storybook",
        description="Interactive picture books generated from a prompt.",
    ),
    CarouselItem(
        id="ai-pitch-bell",
        title="AI Air Bells",
        description="Wave to play; hand height picks the note.",
        eligibility=Eligibility.SELECTABLE,
        activation_target="/aihome/playground/pitch-bell",
    ),
    CarouselItem(
        id="ai-game-cards",
        title="AI Game Cards",
        description="Generated trading cards for custom battles.",
    ),
)
