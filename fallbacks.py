# fallbacks.py
# Demo datasets served when the backend is unreachable and DEMO_FALLBACKS is on.
# Accessors return deep copies so callers can mutate freely.
from copy import deepcopy

from flask import current_app

DEMO_REPORTS = [
    {
        "_id": "TKT-2023",
        "is_valid": True,
        "message": "Large amount of plastic waste detected near residential area",
        "confidence_score": 89,
        "severity": "High",
        "location": "Central Park",
        "description": "Pile of plastic bottles and bags on the roadside",
        "timestamp": "2024-03-22T09:30:00Z",
        "waste_types": "Plastic, Household",
        "status": "pending",
        "submitted_by": {"username": "John D."},
    },
    {
        "_id": "TKT-2022",
        "is_valid": True,
        "message": "Construction debris blocking drainage",
        "confidence_score": 95,
        "severity": "Critical",
        "location": "Main Street",
        "description": "Construction waste blocking street drainage causing water pooling",
        "timestamp": "2024-03-21T14:20:00Z",
        "waste_types": "Construction, Debris",
        "status": "in_progress",
        "submitted_by": {"username": "Sarah M."},
    },
    {
        "_id": "TKT-2021",
        "is_valid": True,
        "message": "Hazardous Waste",
        "confidence_score": 85,
        "severity": "Medium",
        "location": "West Avenue",
        "description": "Chemical containers leaking into ground near industrial area",
        "timestamp": "2024-03-17T13:40:00Z",
        "waste_types": "Industrial, Chemical, Hazardous",
        "status": "pending",
        "submitted_by": {"username": "Michael T."},
    },
    {
        "_id": "TKT-2020",
        "is_valid": True,
        "message": "Electronic waste improperly disposed",
        "confidence_score": 91,
        "severity": "High",
        "location": "Tech District",
        "description": "Old electronics and batteries dumped near water body",
        "timestamp": "2024-03-19T11:15:00Z",
        "waste_types": "Electronic, Hazardous",
        "status": "resolved",
        "submitted_by": {"username": "Laura K."},
    },
]

_PICKUP_HOUSEHOLD = {
    "id": "pickup_001",
    "user_id": "user_123",
    "description": "Household waste collection",
    "location": "123 Green Street, Eco City",
    "pickup_date": "2025-04-10T10:00:00Z",
    "status": "pending",
    "created_at": "2025-04-04T07:21:07.385Z",
    "updated_at": "2025-04-04T07:21:07.385Z",
    "notes": "Please collect from front yard",
}
_PICKUP_GARDEN = {
    "id": "pickup_002",
    "user_id": "user_456",
    "description": "Garden waste pickup",
    "location": "456 Forest Avenue, Green Town",
    "pickup_date": "2025-04-12T14:30:00Z",
    "status": "in_progress",
    "created_at": "2025-04-03T14:30:00Z",
    "updated_at": "2025-04-05T09:15:00Z",
    "notes": "Large amount of tree branches",
}

DEMO_USER_PICKUPS = [
    _PICKUP_HOUSEHOLD,
    _PICKUP_GARDEN,
    {
        "id": "pickup_003",
        "user_id": "user_123",
        "description": "Electronics recycling",
        "location": "123 Green Street, Eco City",
        "pickup_date": "2025-04-15T11:00:00Z",
        "status": "completed",
        "created_at": "2025-04-02T10:45:00Z",
        "updated_at": "2025-04-06T16:20:00Z",
        "notes": "Old computer and TV for recycling",
    },
]

DEMO_ADMIN_PICKUPS = [
    _PICKUP_HOUSEHOLD,
    _PICKUP_GARDEN,
    {
        "id": "pickup_003",
        "user_id": "user_789",
        "description": "Electronics recycling",
        "location": "789 Tech Road, Smart City",
        "pickup_date": "2025-04-15T11:00:00Z",
        "status": "completed",
        "created_at": "2025-04-02T10:45:00Z",
        "updated_at": "2025-04-06T16:20:00Z",
        "notes": "Old computer and TV for recycling",
    },
    {
        "id": "pickup_004",
        "user_id": "user_234",
        "description": "Construction debris",
        "location": "234 Builder Lane, New Town",
        "pickup_date": "2025-04-18T09:00:00Z",
        "status": "pending",
        "created_at": "2025-04-05T08:30:00Z",
        "updated_at": "2025-04-05T08:30:00Z",
        "notes": "From bathroom renovation",
    },
    {
        "id": "pickup_005",
        "user_id": "user_567",
        "description": "Glass recycling",
        "location": "567 Crystal Street, Glass City",
        "pickup_date": "2025-04-20T13:00:00Z",
        "status": "cancelled",
        "created_at": "2025-04-01T11:20:00Z",
        "updated_at": "2025-04-07T14:10:00Z",
        "notes": "Large boxes of glass bottles",
    },
]

DEMO_PICKUP_REQUESTS = [
    {
        "id": "1",
        "location": "123 Main Street, City Center",
        "date": "",
        "time": "",
        "status": "pending",
        "waste_type": "Household Waste",
        "description": "Large amount of household waste accumulated over the weekend",
        "verification_status": "pending",
    },
    {
        "id": "2",
        "location": "456 Park Avenue, Residential Area",
        "date": "",
        "time": "",
        "status": "pending",
        "waste_type": "Recyclables",
        "description": "Cardboard and paper waste from office cleanup",
        "verification_status": "pending",
    },
    {
        "id": "3",
        "location": "789 Market Street, Commercial District",
        "date": "2024-04-05",
        "time": "14:00",
        "status": "scheduled",
        "waste_type": "Organic Waste",
        "description": "Food waste from local restaurants",
        "verification_status": "pending",
    },
]

DEMO_BENEFITS = [
    {
        "id": "med_1",
        "name": "15% off on Health Check-up",
        "coins_required": 500,
        "description": "Get 15% discount on basic health check-up at partner clinics (max discount ₹500)",
        "validity_days": 30,
    },
    {
        "id": "med_2",
        "name": "20% off on Dental Treatment",
        "coins_required": 750,
        "description": "20% discount on basic dental treatments at partner clinics (max discount ₹800)",
        "validity_days": 45,
    },
    {
        "id": "med_3",
        "name": "15% off on Eye Treatment",
        "coins_required": 600,
        "description": "15% discount on basic eye treatments at partner opticians (max discount ₹600)",
        "validity_days": 45,
    },
    {
        "id": "med_4",
        "name": "20% off on Physiotherapy",
        "coins_required": 800,
        "description": "20% discount on physiotherapy sessions at partner clinics (max discount ₹1000)",
        "validity_days": 60,
    },
]

_DEMO_WALLET = {
    "id": "67f0186f8655a7d2fdf565da",
    "user_id": None,
    "balance": 10,
    "created_at": "2025-04-04T17:35:43.847000",
    "updated_at": "2025-04-04T17:35:43.859000",
    "total_earned": 10,
    "total_spent": 0,
}

DEMO_LEADERBOARD = {
    "cities": [
        {
            "id": "67ef8b23a8fd49d35469a180",
            "city_name": "Sangamner",
            "city_name_lower": "sangamner",
            "rank": 1,
            "total_users": 1,
            "total_reports": 9,
            "pending_reports": 4,
            "engagement_score": 2,
            "total_score": 0.55,
            "last_updated": "2025-04-04T07:37:22.618000",
        },
        {
            "id": "67ef8c33a8fd49d35469a181",
            "city_name": "Pune",
            "city_name_lower": "pune",
            "rank": 2,
            "total_users": 2,
            "total_reports": 16,
            "pending_reports": 11,
            "engagement_score": 1.5,
            "authority_score": 0,
            "citizen_score": 0.75,
            "total_score": 0.375,
            "last_updated": "2025-04-04T07:42:54.158000",
        },
    ],
    "last_updated": "2025-04-04T11:04:21.563571",
}

# Pune waste facilities shown on the deposits map
WASTE_DUMPS = [
    {"id": "1", "name": "Shivaji Nagar Waste Facility", "latitude": 18.53, "longitude": 73.855, "status": "empty", "capacity": 80, "lastUpdated": "2024-03-20T10:00:00Z"},
    {"id": "2", "name": "Camp Area Recycling Center", "latitude": 18.5186, "longitude": 73.8441, "status": "full", "capacity": 60, "lastUpdated": "2024-03-21T11:00:00Z"},
    {"id": "3", "name": "Sadashiv Peth Waste Management", "latitude": 18.5234, "longitude": 73.86, "status": "empty", "capacity": 75, "lastUpdated": "2024-03-20T09:30:00Z"},
    {"id": "4", "name": "Kothrud Waste Facility", "latitude": 18.5361, "longitude": 73.8037, "status": "full", "capacity": 90, "lastUpdated": "2024-03-22T08:45:00Z"},
    {"id": "5", "name": "Baner Recycling Center", "latitude": 18.5816, "longitude": 73.7418, "status": "empty", "capacity": 70, "lastUpdated": "2024-03-19T14:20:00Z"},
    {"id": "6", "name": "Wakad Waste Management", "latitude": 18.6285, "longitude": 73.7773, "status": "full", "capacity": 85, "lastUpdated": "2024-03-22T12:15:00Z"},
    {"id": "7", "name": "Hadapsar Waste Facility", "latitude": 18.5196, "longitude": 73.9451, "status": "empty", "capacity": 65, "lastUpdated": "2024-03-20T16:00:00Z"},
    {"id": "8", "name": "Katraj Recycling Center", "latitude": 18.4983, "longitude": 73.8729, "status": "full", "capacity": 95, "lastUpdated": "2024-03-21T10:30:00Z"},
    {"id": "9", "name": "Aundh Waste Management", "latitude": 18.5724, "longitude": 73.7893, "status": "empty", "capacity": 80, "lastUpdated": "2024-03-22T09:00:00Z"},
    {"id": "10", "name": "Magarpatta Recycling Facility", "latitude": 18.5503, "longitude": 73.8901, "status": "full", "capacity": 100, "lastUpdated": "2024-03-21T13:45:00Z"},
    {"id": "11", "name": "Mundhwa Waste Facility", "latitude": 18.5313, "longitude": 73.9063, "status": "empty", "capacity": 55, "lastUpdated": "2024-03-19T11:00:00Z"},
    {"id": "12", "name": "Sinhagad Road Recycling Center", "latitude": 18.4475, "longitude": 73.8073, "status": "full", "capacity": 90, "lastUpdated": "2024-03-22T07:30:00Z"},
    {"id": "13", "name": "Undri Waste Management", "latitude": 18.6091, "longitude": 73.7943, "status": "empty", "capacity": 60, "lastUpdated": "2024-03-20T12:00:00Z"},
    {"id": "14", "name": "Shukrawar Peth Waste Facility", "latitude": 18.5254, "longitude": 73.8587, "status": "full", "capacity": 85, "lastUpdated": "2024-03-21T15:15:00Z"},
    {"id": "15", "name": "Pimpri-Chinchwad Recycling Center", "latitude": 18.6295, "longitude": 73.7997, "status": "empty", "capacity": 75, "lastUpdated": "2024-03-22T14:00:00Z"},
]


def demo_reports() -> list:
    return deepcopy(DEMO_REPORTS)


def demo_pickups(admin: bool) -> list:
    return deepcopy(DEMO_ADMIN_PICKUPS if admin else DEMO_USER_PICKUPS)


def demo_pickup_requests() -> list:
    return deepcopy(DEMO_PICKUP_REQUESTS)


def demo_benefits() -> list:
    return deepcopy(DEMO_BENEFITS)


def demo_wallet(user_id: str) -> dict:
    wallet = deepcopy(_DEMO_WALLET)
    wallet["user_id"] = user_id
    return wallet


def demo_leaderboard() -> dict:
    return deepcopy(DEMO_LEADERBOARD)


def waste_dumps() -> list:
    return deepcopy(WASTE_DUMPS)


def offline_validation(location: str, description: str, lighting: str = "unknown") -> dict:
    """Validation result used when the classifier backend cannot be reached."""
    return {
        "is_valid": True,
        "message": f"Waste report received for {location}. Automatic validation is "
                   f"unavailable, so the report will be reviewed manually.",
        "confidence_score": 80,
        "severity": "Medium",
        "waste_types": [],
        "dustbins": [],
        "recyclable_items": [],
        "time_analysis": {
            "time_appears_valid": True,
            "lighting_condition": lighting,
            "notes": "Lighting estimated locally from the uploaded image.",
        },
        "description_match": {
            "matches_image": bool(description),
            "confidence": 0,
            "notes": "Description not checked against the image.",
        },
        "additional_data": {"offline": True},
    }


def enabled() -> bool:
    return bool(current_app.config.get("DEMO_FALLBACKS"))
