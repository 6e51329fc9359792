import json
import logging
import os

import firebase_admin
from firebase_admin import credentials, firestore

FIREBASE_SERVICE_ACCOUNT_PATH = "credentials/serviceAccountKey.json"


def initialize_firebase():
    """
    Initialize the Firebase Admin SDK once and return a Firestore client.

    Credentials, in order: FIREBASE_SERVICE_ACCOUNT_CONTENT (JSON string),
    FIREBASE_SERVICE_ACCOUNT_PATH / GOOGLE_APPLICATION_CREDENTIALS (file),
    credentials/serviceAccountKey.json.
    """
    if not firebase_admin._apps:  # Check if Firebase app is not already initialized
        content = os.environ.get("FIREBASE_SERVICE_ACCOUNT_CONTENT")
        cred_path = (os.environ.get("FIREBASE_SERVICE_ACCOUNT_PATH")
                     or os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
                     or FIREBASE_SERVICE_ACCOUNT_PATH)
        if content:
            cred = credentials.Certificate(json.loads(content))
            firebase_admin.initialize_app(cred)
            logging.info("Firebase initialized using environment variable.")
        elif os.path.exists(cred_path):
            cred = credentials.Certificate(cred_path)
            firebase_admin.initialize_app(cred)
            logging.info(f"Firebase initialized using {cred_path}.")
        else:
            logging.error(
                f"Firebase service account not found. Expected env var FIREBASE_SERVICE_ACCOUNT_CONTENT "
                f"or file at {cred_path}."
            )
            raise FileNotFoundError(
                f"Firebase service account not found. Expected env var FIREBASE_SERVICE_ACCOUNT_CONTENT "
                f"or file at {cred_path}."
            )

    return firestore.client(app=firebase_admin.get_app())
