import secrets
import time
from typing import Any, Dict, Iterable, List, Optional


class CardTemplate:
    """A catalog card a player can place any number of times."""

    def __init__(self, card_id: str, name: str = '', image_url: Optional[str] = None, power: int = 0):
        self.id = card_id
        self.name = name
        self.image_url = image_url
        self.power = power or 0

    def __eq__(self, other):
        return isinstance(other, CardTemplate) and other.id == self.id

    def __hash__(self):
        return hash(self.id)

    def __repr__(self):
        return f'CardTemplate({self.id!r})'

    def mint(self) -> Dict[str, Any]:
        """Create a board card whose id keeps the catalog id but is unique."""
        return {
            'id': f'{self.id}-{int(time.time() * 1000)}-{secrets.token_hex(3)}',
            'name': self.name,
            'imageUrl': self.image_url,
            'power': self.power,
        }


def card_power(card: Dict[str, Any]) -> int:
    try:
        return int(card.get('power') or 0)
    except (TypeError, ValueError):
        return 0


def deck_from_selection(deck: Optional[Dict[str, Any]], catalog: Iterable[Dict[str, Any]]) -> List[CardTemplate]:
    """Resolve a stored deck into the unique templates shown in the hand.

    Deck entries look like ``{'cardId': ..., 'count': ...}``; counts are
    ignored because placing never consumes a template. Ids missing from the
    catalog are skipped and deck order is kept.
    """
    if not deck:
        return []
    by_id = {str(c.get('id')): c for c in catalog}
    templates: List[CardTemplate] = []
    seen = set()
    for entry in deck.get('cards') or []:
        card_id = str(entry.get('cardId'))
        data = by_id.get(card_id)
        if data is None or card_id in seen:
            continue
        seen.add(card_id)
        templates.append(CardTemplate(
            card_id,
            name=data.get('name') or '',
            image_url=data.get('image'),
            power=card_power(data),
        ))
    return templates
