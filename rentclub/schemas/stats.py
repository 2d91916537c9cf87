from pydantic import BaseModel


class AppStats(BaseModel):
    users_count: int
    properties_count: int
    bookings_count: int
    members_count: int


class ChartPoint(BaseModel):
    date: str
    count: int
