"""
Report records.

Every record exposes `to_dict()` returning the camelCase JSON shape the
dashboard consumes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class InsightType(Enum):
    TRENDING = "trending"
    HOT = "hot"
    OPPORTUNITY = "opportunity"


@dataclass
class CommunityPerformance:
    name: str
    path: str
    map_loads: int
    lot_clicks: int = 0
    ctr: float = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "mapLoads": self.map_loads,
            "lotClicks": self.lot_clicks,
            "ctr": self.ctr,
        }


@dataclass(frozen=True)
class CommunityLoads:
    community: str
    path: str
    map_loads: int


@dataclass(frozen=True)
class CommunityClicks:
    community: str
    lot_clicks: int


@dataclass(frozen=True)
class MapLoadsResult:
    total: int
    by_community: List[CommunityLoads]


@dataclass(frozen=True)
class LotClicksResult:
    total: int
    by_community: List[CommunityClicks]


@dataclass(frozen=True)
class TopLot:
    rank: int
    lot: str
    community: str
    clicks: int
    share: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank": self.rank,
            "lot": self.lot,
            "community": self.community,
            "clicks": self.clicks,
            "share": self.share,
        }


@dataclass
class ViewOverTime:
    """Views for one date label, split by community series key."""

    date: str
    total: int = 0
    communities: Dict[str, int] = field(default_factory=dict)

    def add(self, key: str, views: int) -> None:
        self.communities[key] = self.communities.get(key, 0) + views
        self.total += views

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date, "total": self.total, "communities": dict(self.communities)}


@dataclass(frozen=True)
class Insight:
    type: InsightType
    title: str
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, "title": self.title, "description": self.description}


@dataclass(frozen=True)
class DayOfWeekClicks:
    day: str
    clicks: int
    day_index: int

    def to_dict(self) -> Dict[str, Any]:
        return {"day": self.day, "clicks": self.clicks, "dayIndex": self.day_index}


@dataclass(frozen=True)
class BreakdownItem:
    """Share of active users for one value of an audience dimension."""

    label: str
    users: int
    percentage: float

    def to_dict(self, label_key: str = "label") -> Dict[str, Any]:
        return {label_key: self.label, "users": self.users, "percentage": self.percentage}


@dataclass(frozen=True)
class TrafficSource:
    source: str
    medium: str
    sessions: int
    percentage: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "medium": self.medium,
            "sessions": self.sessions,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class Summary:
    total_map_loads: int
    total_lot_clicks: int
    click_through_rate: float
    top_community: str
    avg_time_on_map: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalMapLoads": self.total_map_loads,
            "totalLotClicks": self.total_lot_clicks,
            "clickThroughRate": self.click_through_rate,
            "topCommunity": self.top_community,
            "avgTimeOnMap": self.avg_time_on_map,
        }


@dataclass(frozen=True)
class MarketReport:
    organization: Dict[str, str]
    date_range: Dict[str, str]
    summary: Summary
    community_performance: List[CommunityPerformance]
    top_lots: List[TopLot]
    views_over_time: List[ViewOverTime]
    insights: List[Insight]
    clicks_by_day_of_week: List[DayOfWeekClicks] = field(default_factory=list)
    device_breakdown: List[BreakdownItem] = field(default_factory=list)
    country_breakdown: List[BreakdownItem] = field(default_factory=list)
    browser_breakdown: List[BreakdownItem] = field(default_factory=list)
    os_breakdown: List[BreakdownItem] = field(default_factory=list)
    traffic_sources: List[TrafficSource] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "organization": dict(self.organization),
            "dateRange": dict(self.date_range),
            "summary": self.summary.to_dict(),
            "communityPerformance": [item.to_dict() for item in self.community_performance],
            "topLots": [lot.to_dict() for lot in self.top_lots],
            "viewsOverTime": [point.to_dict() for point in self.views_over_time],
            "clicksByDayOfWeek": [day.to_dict() for day in self.clicks_by_day_of_week],
            "deviceBreakdown": [item.to_dict("device") for item in self.device_breakdown],
            "countryBreakdown": [item.to_dict("country") for item in self.country_breakdown],
            "browserBreakdown": [item.to_dict("browser") for item in self.browser_breakdown],
            "osBreakdown": [item.to_dict("os") for item in self.os_breakdown],
            "trafficSources": [source.to_dict() for source in self.traffic_sources],
            "insights": [insight.to_dict() for insight in self.insights],
        }
