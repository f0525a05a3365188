"""Read-only view of what a petition requires from its signers."""


class PetitionPolicy:
    """Validation gates derived from a petition's type.

    Every predicate is False when there is no petition type, so a signature
    without a petition is never held to the optional requirements.
    """

    def __init__(self, petition_type=None):
        self.petition_type = petition_type

    @classmethod
    def for_signature(cls, signature) -> "PetitionPolicy":
        petition = signature.petition
        return cls(petition.petition_type if petition is not None else None)

    @property
    def requires_full_address(self) -> bool:
        return self.petition_type is not None and bool(
            self.petition_type.require_signature_full_address
        )

    @property
    def requires_born_at(self) -> bool:
        return self.petition_type is not None and bool(self.petition_type.require_person_born_at)

    @property
    def requires_minimum_age(self) -> bool:
        return self.petition_type is not None and self.petition_type.required_minimum_age is not None

    @property
    def requires_birth_city(self) -> bool:
        return self.petition_type is not None and bool(self.petition_type.require_person_birth_city)

    @property
    def requires_country(self) -> bool:
        return self.petition_type is not None and bool(self.petition_type.country_code)

    @property
    def required_minimum_age(self) -> int | None:
        if not self.requires_minimum_age:
            return None
        return self.petition_type.required_minimum_age
