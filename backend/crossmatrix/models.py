from crossmatrix import db
import json


class Card(db.Model):
    __tablename__ = 'card'
    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    image = db.Column(db.String(512), nullable=True)
    power = db.Column(db.Integer, default=0, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'image': self.image,
            'power': self.power or 0,
        }


class Deck(db.Model):
    __tablename__ = 'deck'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), nullable=False)
    owner = db.Column(db.String(64), nullable=True, index=True)
    entries = db.relationship('DeckEntry', back_populates='deck', order_by='DeckEntry.position',
                              cascade='all, delete-orphan')

    def to_dict(self, include_cards=True):
        data = {
            'id': self.id,
            'name': self.name,
            'owner': self.owner,
        }
        if include_cards:
            data['cards'] = [e.to_dict() for e in self.entries]
        return data


class DeckEntry(db.Model):
    __tablename__ = 'deck_entry'
    id = db.Column(db.Integer, primary_key=True)
    deck_id = db.Column(db.Integer, db.ForeignKey('deck.id'), nullable=False)
    card_id = db.Column(db.String(64), db.ForeignKey('card.id'), nullable=False)
    count = db.Column(db.Integer, default=1, nullable=False)
    position = db.Column(db.Integer, default=0, nullable=False)
    deck = db.relationship('Deck', back_populates='entries')

    def to_dict(self):
        return {
            'cardId': self.card_id,
            'count': self.count,
        }


def load_cards(cards) -> int:
    """Insert or update catalog cards from a list of cards.json entries."""
    count = 0
    for raw in cards:
        card_id = raw.get('id')
        if not card_id:
            continue
        card = db.session.get(Card, str(card_id)) or Card(id=str(card_id))
        card.name = raw.get('name') or str(card_id)
        card.image = raw.get('image')
        try:
            card.power = int(raw.get('power') or 0)
        except (TypeError, ValueError):
            card.power = 0
        db.session.add(card)
        count += 1
    db.session.commit()
    return count


def load_cards_from_file(path) -> int:
    with open(path, encoding='utf-8') as fh:
        return load_cards(json.load(fh))
