import enum


class ItemStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    partially_accepted = "partially_accepted"


class ReturnStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    returned = "returned"
    non_returnable = "non_returnable"
    replaced = "replaced"


class RejectionCaseStatus(str, enum.Enum):
    pending = "pending"
    processing = "processing"
    resolved = "resolved"
    partially_resolved = "partially_resolved"


class ContactMethod(str, enum.Enum):
    email = "email"
    phone = "phone"
    whatsapp = "whatsapp"


class DeliveryStatus(str, enum.Enum):
    sent = "sent"
    delivered = "delivered"
    read = "read"
    failed = "failed"
