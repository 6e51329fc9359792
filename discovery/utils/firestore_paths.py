# Centralized Firestore path helpers
# Canonical: /users/{uid}/settings/discovery_location

DISCOVERY_LOCATION_DOC = "discovery_location"


def user_doc(db, user_id: str):
    return db.collection("users").document(user_id)


def settings_col(db, user_id: str):
    return user_doc(db, user_id).collection("settings")


def discovery_location_doc(db, user_id: str):
    return settings_col(db, user_id).document(DISCOVERY_LOCATION_DOC)


def content_col(db, collection: str):
    return db.collection(collection)
