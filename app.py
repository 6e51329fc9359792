import logging

from dotenv import load_dotenv
load_dotenv()

from discovery.firebase.firebase_config import initialize_firebase
from discovery.main import create_app
from discovery.services.firestore_stores import FirestoreContentStore, FirestoreLocationStore
from discovery.services.geocoding import (
    FallbackReverseGeocoder,
    GoogleReverseGeocoder,
    NominatimForwardGeocoder,
    NominatimReverseGeocoder,
)
from discovery.utils.settings import DiscoverySettings

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

settings = DiscoverySettings.from_env()
db = initialize_firebase()

# Google first when a key is configured, Nominatim as the fallback
geocoders = []
if settings.maps_api_key:
    geocoders.append(GoogleReverseGeocoder(api_key=settings.maps_api_key))
else:
    logging.warning("Maps_API_KEY not set; reverse geocoding uses Nominatim only.")
geocoders.append(NominatimReverseGeocoder(user_agent=settings.nominatim_user_agent))

app = create_app(
    content_store=FirestoreContentStore(db, settings.content_collection, settings.content_status),
    location_store_factory=lambda user_id: FirestoreLocationStore(db, user_id),
    reverse_geocoder=FallbackReverseGeocoder(geocoders),
    forward_geocoder=NominatimForwardGeocoder(user_agent=settings.nominatim_user_agent),
    settings=settings,
)


if __name__ == '__main__':
    app.run(debug=True)
