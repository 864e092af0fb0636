"""Raw response shapes of the third-party contact databases. Unknown fields are ignored."""

from pydantic import BaseModel, ConfigDict, Field


class _Loose(BaseModel):
    model_config = ConfigDict(extra="ignore")


class HunterEmail(_Loose):
    value: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    position: str | None = None
    department: str | None = None
    seniority: str | None = None
    phone_number: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(filter(None, [self.first_name, self.last_name])).strip()


class HunterDomainSearch(_Loose):
    organization: str | None = None
    description: str | None = None
    industry: str | None = None
    employee_count: int | None = None
    headcount: str | None = None
    country: str | None = None
    city: str | None = None
    emails: list[HunterEmail] = Field(default_factory=list)


class HunterResponse(_Loose):
    data: HunterDomainSearch | None = None


class ApolloOrganization(_Loose):
    name: str | None = None
    short_description: str | None = None
    industry: str | None = None
    estimated_num_employees: int | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None

    @property
    def location(self) -> str:
        return ", ".join(filter(None, [self.city, self.state, self.country]))


class ApolloPerson(_Loose):
    first_name: str | None = None
    last_name: str | None = None
    title: str | None = None
    email: str | None = None
    sanitized_phone: str | None = None

    @property
    def full_name(self) -> str:
        return " ".join(filter(None, [self.first_name, self.last_name])).strip()


class ApolloOrganizationSearch(_Loose):
    organizations: list[ApolloOrganization] | None = None


class ApolloPeopleSearch(_Loose):
    people: list[ApolloPerson] | None = None


class ClearbitGeo(_Loose):
    city: str | None = None
    state: str | None = None
    country: str | None = None


class ClearbitCategory(_Loose):
    industry: str | None = None


class ClearbitMetrics(_Loose):
    employees: int | None = None


class ClearbitCompany(_Loose):
    name: str | None = None
    description: str | None = None
    category: ClearbitCategory = Field(default_factory=ClearbitCategory)
    metrics: ClearbitMetrics = Field(default_factory=ClearbitMetrics)
    geo: ClearbitGeo = Field(default_factory=ClearbitGeo)

    @property
    def location(self) -> str:
        return ", ".join(filter(None, [self.geo.city, self.geo.state, self.geo.country]))
