from petitions.models.petition import Petition, PetitionType
from petitions.models.signature import Signature, generate_unique_key
from petitions.models.settings import Settings

__all__ = [
    "Petition",
    "PetitionType",
    "Signature",
    "generate_unique_key",
    "Settings",
]
