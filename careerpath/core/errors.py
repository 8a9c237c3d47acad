class CareerPathError(Exception):
    """Base class for every failure raised by the scoring core."""


class CatalogUnavailableError(CareerPathError):
    """
    Catalog data could not be retrieved and there is no cached snapshot.
    Evaluation must stop here: an empty requirement set would read as
    "no requirements" and qualify the student for everything.
    """

    def __init__(self, what: str, cause: Exception = None):
        self.what = what
        self.cause = cause
        msg = f"Catalog data unavailable: {what}"
        if cause is not None:
            msg += f" ({cause})"
        super().__init__(msg)


class UnknownCountryError(CareerPathError):
    def __init__(self, country: str):
        self.country = country
        super().__init__(f"Unknown country: {country!r}")


class UnknownCareerError(CareerPathError):
    def __init__(self, career: str, country: str = None):
        self.career = career
        self.country = country
        where = f" for {country}" if country else ""
        super().__init__(f"Unknown career{where}: {career!r}")
