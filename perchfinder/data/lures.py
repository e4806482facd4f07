# perchfinder/data/lures.py
"""Built-in lure catalog, served when the 'Lures' collection is empty."""

from perchfinder.models.catch import LureOption

DEFAULT_LURES = [
    LureOption(
        id="keitech-swing-impact-3-motoroil",
        name='Swing Impact 3"',
        category="Jigg",
        brand="Keitech",
        size='3"',
        color="Motoroil",
    ),
    LureOption(
        id="keitech-easy-shiner-4-sight-flash",
        name='Easy Shiner 4"',
        category="Jigg",
        brand="Keitech",
        size='4"',
        color="Sight Flash",
    ),
    LureOption(
        id="westin-swim-12-perch",
        name="Swim",
        category="Swimbait",
        brand="Westin",
        size="12 cm",
        color="Perch",
    ),
    LureOption(
        id="rapala-original-floater-f11-bleak",
        name="Original Floater F11",
        category="Wobbler",
        brand="Rapala",
        size="11 cm",
        color="Bleak",
    ),
    LureOption(
        id="svartzonker-mcrubber-9-firetiger",
        name="McRubber",
        category="Shad",
        brand="Svartzonker",
        size="22 cm",
        color="Firetiger",
    ),
]
