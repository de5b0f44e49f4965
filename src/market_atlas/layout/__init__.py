from market_atlas.layout.bubbles import (
    BubbleEntity,
    BubbleLayout,
    BubbleLayoutConfig,
    BubbleLayoutResolver,
)

__all__ = [
    "BubbleEntity",
    "BubbleLayout",
    "BubbleLayoutConfig",
    "BubbleLayoutResolver",
]
