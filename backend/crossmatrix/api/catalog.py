from flask import Blueprint, jsonify, request
from crossmatrix import db
from crossmatrix.models import Card, Deck

catalog = Blueprint('catalog', __name__)


@catalog.route('/cards', methods=['GET'])
def list_cards():
    cards = Card.query.order_by(Card.id).all()
    return jsonify([c.to_dict() for c in cards])


@catalog.route('/cards/<string:card_id>', methods=['GET'])
def get_card(card_id):
    card = db.session.get(Card, card_id)
    if card is None:
        return jsonify({'error': 'Card not found'}), 404
    return jsonify(card.to_dict())


@catalog.route('/decks', methods=['GET'])
def list_decks():
    """
    Lists stored decks, optionally filtered by owner. Entries are omitted;
    fetch a single deck to get its card list.
    """
    query = Deck.query
    owner = request.args.get('owner')
    if owner:
        query = query.filter_by(owner=owner)
    return jsonify([d.to_dict(include_cards=False) for d in query.order_by(Deck.id).all()])


@catalog.route('/decks/<int:deck_id>', methods=['GET'])
def get_deck(deck_id):
    deck = Deck.query.filter_by(id=deck_id).first_or_404()
    return jsonify(deck.to_dict())
