from restaurant_pos import db
from restaurant_pos.errors import IdentifierMismatch, NotFound
from restaurant_pos.services.storage import transaction


def _label(entity):
    return entity.replace("_", " ")


# Build the response envelope shared by every endpoint

def item_response(item, entity, action, status=200, extra_msg=""):
    return {
        f"{entity}": item.to_dict(),
        "message": f"{_label(entity).capitalize()} {action} successfully" + extra_msg,
        "status": status
    }, status


def list_response(items, entity):
    return {
        f"{entity}s": [item.to_dict() for item in items],
        "message": f"all {_label(entity)}s fetched successfully",
        "status": 200
    }, 200


def message_response(message, status=200):
    return {"message": message, "status": status}, status


# Single-row CRUD

def get_item_by_id_logic(Model, id, not_found=NotFound):
    """Fetch an item by ID."""
    item = db.session.get(Model, id)
    if item is None:
        raise not_found()
    return item


def get_all_item_logic(Model):
    """Fetch all items from the database."""
    return Model.query.order_by(Model.id).all()


def create_logic(Model, data):
    """Business logic to create a new entry"""
    item = Model(**data)
    with transaction():
        db.session.add(item)
    return item


def check_identifier(data, id_field, path_id):
    """The id carried in the body must name the resource in the URL."""
    if data.get(id_field) != path_id:
        raise IdentifierMismatch(
            f"The {_label(id_field)} in the request does not match the URL")


def update_logic(item, data, id_field, path_id):
    check_identifier(data, id_field, path_id)
    with transaction():
        for key, value in data.items():
            if key != id_field and hasattr(item, key):
                setattr(item, key, value)
    return item


def delete_logic(item):
    """Delete an item."""
    with transaction():
        db.session.delete(item)
