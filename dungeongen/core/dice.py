"""
Dice notation support for content generation.

Handles the dice expressions used by catalog entries:
- Standard dice (d4, d6, d8, d10, d12, d20, d100)
- Notation parsing (2d6+3, 1d8+1d6, etc.)
- Rolling with an injectable random source for reproducible runs
"""
import random
import re
from typing import List, Optional, Tuple


def roll_die(sides: int, rng: Optional[random.Random] = None) -> int:
    """Roll a single die with the given number of sides."""
    if sides < 1:
        raise ValueError(f"Invalid die: d{sides}")
    rng = rng or random
    return rng.randint(1, sides)


def parse_dice_notation(notation: str) -> List[Tuple[int, int, int]]:
    """
    Parse dice notation into components.

    Args:
        notation: Dice notation like "2d6+3", "1d8+1d6", "3d4-1"

    Returns:
        List of (count, sides, modifier) tuples.
        For "2d6+3+1d4", returns [(2, 6, 3), (1, 4, 0)]

    Raises:
        ValueError: If notation is invalid
    """
    if not notation:
        raise ValueError("Empty dice notation")

    notation = notation.lower().replace(" ", "")
    components = []

    # Split by + or - while keeping the sign
    parts = re.split(r'(?=[+-])', notation)

    current_modifier = 0

    for part in parts:
        if not part:
            continue

        dice_match = re.match(r'^([+-]?)(\d*)d(\d+)$', part)
        if dice_match:
            sign = -1 if dice_match.group(1) == '-' else 1
            count = int(dice_match.group(2)) if dice_match.group(2) else 1
            sides = int(dice_match.group(3))
            components.append((sign * count, sides, 0))
        else:
            # It's a flat modifier
            try:
                current_modifier += int(part)
            except ValueError:
                raise ValueError(f"Invalid dice notation: {notation}")

    # Add the modifier to the last component, or create a dummy if none
    if components:
        count, sides, _ = components[-1]
        components[-1] = (count, sides, current_modifier)
    elif current_modifier != 0:
        components.append((0, 0, current_modifier))

    return components


def roll_notation(notation: str, rng: Optional[random.Random] = None, minimum: int = 1) -> int:
    """
    Roll a full dice expression and return the total.

    Args:
        notation: Dice notation like "2d8+2"
        rng: Random source; the module-level generator when omitted
        minimum: Floor applied to the total (hit points never drop below 1)

    Returns:
        The rolled total
    """
    total = 0
    for count, sides, flat_mod in parse_dice_notation(notation):
        if sides:
            sign = 1 if count >= 0 else -1
            for _ in range(abs(count)):
                total += sign * roll_die(sides, rng)
        total += flat_mod
    return max(minimum, total)
