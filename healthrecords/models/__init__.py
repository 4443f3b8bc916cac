# Importing the model modules registers every table with SQLAlchemy
# before relationships are configured.
from healthrecords.models import (  # noqa: F401
    health_record_models,
    store_models,
    system_models,
    user_models,
)
