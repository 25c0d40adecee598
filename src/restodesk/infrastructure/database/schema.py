"""SQLAlchemy Core table definitions for the restodesk database.

Timestamps and dates are stored as ISO-8601 text so that ordering and
range filters compare correctly and the UTC offset survives a round
trip. Rows are converted to domain models with ``model_validate``.
"""

from __future__ import annotations

from sqlalchemy import (
    JSON,
    REAL,
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
)

metadata = MetaData()

restaurants = Table(
    "restaurants",
    metadata,
    Column("id", Text, primary_key=True),
    Column("account_id", Text),
    Column("external_restaurant_id", Text, nullable=False),
    Column("name", Text, nullable=False),
    Column("address", Text),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("review_auto_reply_enabled", Boolean, nullable=False, default=False),
    Column("review_auto_reply_mode", Text, nullable=False, default="template"),
    Column("review_reply_template", Text),
    Column("review_ai_prompt", Text),
    Column("ticket_auto_reply_enabled", Boolean, nullable=False, default=False),
    Column("ticket_auto_reply_mode", Text, nullable=False, default="template"),
    Column("ticket_reply_template", Text),
    Column("ticket_ai_prompt", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

restaurant_snapshots = Table(
    "restaurant_snapshots",
    metadata,
    Column("id", Text, primary_key=True),
    Column("restaurant_id", Text, ForeignKey("restaurants.id"), nullable=False),
    Column("week_start", Text, nullable=False),
    Column("week_end", Text, nullable=False),
    Column("visits", Integer, nullable=False),
    Column("views", Integer, nullable=False),
    Column("to_cart", Integer, nullable=False),
    Column("checkout", Integer, nullable=False),
    Column("completed", Integer, nullable=False),
    Column("cancellation_rate", REAL, nullable=False),
    Column("open_time_rate", REAL, nullable=False),
    Column("open_tickets_rate", REAL, nullable=False),
    Column("new_customers_rate", REAL, nullable=False),
    Column("created_at", Text, nullable=False),
)

catalog_items = Table(
    "catalog_items",
    metadata,
    Column("id", Text, primary_key=True),
    Column("restaurant_id", Text, ForeignKey("restaurants.id"), nullable=False),
    Column("external_item_id", Text, nullable=False),
    Column("category_id", Text),
    Column("category_name", Text),
    Column("name", Text, nullable=False),
    Column("description", Text),
    Column("price", REAL, nullable=False),
    Column("image_url", Text),
    Column("is_available", Boolean, nullable=False, default=True),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

actions = Table(
    "actions",
    metadata,
    Column("id", Text, primary_key=True),
    Column("restaurant_id", Text, ForeignKey("restaurants.id"), nullable=False),
    Column("report_id", Text),
    Column("week_start", Text, nullable=False),
    Column("title", Text, nullable=False),
    Column("description", Text),
    Column("goal", Text),
    Column("action_type", Text, nullable=False),
    Column("payload", JSON),
    Column("target", Text),
    Column("status", Text, nullable=False),
    Column("done_evidence", Text),
    Column("done_attachments", JSON),
    Column("done_by", Text),
    Column("done_at", Text),
    Column("discarded_reason", Text),
    Column("discarded_by", Text),
    Column("discarded_at", Text),
    Column("created_by", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

image_jobs = Table(
    "image_jobs",
    metadata,
    Column("id", Text, primary_key=True),
    Column("catalog_item_id", Text, ForeignKey("catalog_items.id"), nullable=False),
    Column("restaurant_id", Text, ForeignKey("restaurants.id"), nullable=False),
    Column("mode", Text, nullable=False),
    Column("status", Text, nullable=False),
    Column("prompt", Text),
    Column("source_image_url", Text),
    Column("generated_image_url", Text),
    Column("new_description", Text),
    Column("created_by", Text),
    Column("approved_by", Text),
    Column("approved_at", Text),
    Column("rejected_by", Text),
    Column("rejected_at", Text),
    Column("applied_at", Text),
    Column("error_message", Text),
    Column("retry_count", Integer, nullable=False, default=0, server_default="0"),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

reports = Table(
    "reports",
    metadata,
    Column("id", Text, primary_key=True),
    Column("restaurant_id", Text, ForeignKey("restaurants.id"), nullable=False),
    Column("week_start", Text, nullable=False),
    Column("week_end", Text, nullable=False),
    Column("status", Text, nullable=False),
    Column("pdf_url", Text),
    Column("pdf_hash", Text),
    Column("error_message", Text),
    Column("generated_at", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

report_send_logs = Table(
    "report_send_logs",
    metadata,
    Column("id", Text, primary_key=True),
    Column("report_id", Text, ForeignKey("reports.id"), nullable=False),
    Column("sent_by", Text),
    Column("channel", Text, nullable=False),
    Column("status", Text, nullable=False),
    Column("error_message", Text),
    Column("sent_at", Text),
    Column("created_at", Text, nullable=False),
)

report_internal_contents = Table(
    "report_internal_contents",
    metadata,
    Column("id", Text, primary_key=True),
    Column("report_id", Text, ForeignKey("reports.id"), nullable=False, unique=True),
    Column("content", Text, nullable=False),
    Column("updated_by", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

checklist_items = Table(
    "checklist_items",
    metadata,
    Column("id", Text, primary_key=True),
    Column("restaurant_id", Text, ForeignKey("restaurants.id"), nullable=False),
    Column("report_id", Text, ForeignKey("reports.id")),
    Column("week_start", Text),
    Column("title", Text, nullable=False),
    Column("is_checked", Boolean, nullable=False, default=False),
    Column("checked_by", Text),
    Column("checked_at", Text),
    Column("created_at", Text, nullable=False),
)

tickets = Table(
    "tickets",
    metadata,
    Column("id", Text, primary_key=True),
    Column("restaurant_id", Text, ForeignKey("restaurants.id"), nullable=False),
    Column("external_ticket_id", Text, nullable=False),
    Column("order_id", Text),
    Column("subject", Text),
    Column("status", Text, nullable=False),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

ticket_messages = Table(
    "ticket_messages",
    metadata,
    Column("id", Text, primary_key=True),
    Column("ticket_id", Text, ForeignKey("tickets.id"), nullable=False),
    Column("external_message_id", Text),
    Column("sender", Text, nullable=False),
    Column("content", Text, nullable=False),
    Column("response_mode", Text),
    Column("response_status", Text),
    Column("response_error", Text),
    Column("sent_at", Text),
    Column("created_at", Text, nullable=False),
)

reviews = Table(
    "reviews",
    metadata,
    Column("id", Text, primary_key=True),
    Column("restaurant_id", Text, ForeignKey("restaurants.id"), nullable=False),
    Column("external_review_id", Text, nullable=False),
    Column("order_id", Text),
    Column("rating", Integer, nullable=False),
    Column("comment", Text),
    Column("customer_name", Text),
    Column("review_date", Text, nullable=False),
    Column("response", Text),
    Column("response_sent_at", Text),
    Column("response_mode", Text),
    Column("response_status", Text),
    Column("response_error", Text),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

financial_entries = Table(
    "financial_entries",
    metadata,
    Column("id", Text, primary_key=True),
    Column("restaurant_id", Text, ForeignKey("restaurants.id"), nullable=False),
    Column("external_entry_id", Text),
    Column("entry_type", Text, nullable=False),
    Column("description", Text),
    Column("amount", REAL, nullable=False),
    Column("reference_date", Text, nullable=False),
    Column("order_id", Text),
    Column("created_at", Text, nullable=False),
)

user_profiles = Table(
    "user_profiles",
    metadata,
    Column("id", Text, primary_key=True),
    Column("email", Text, nullable=False, unique=True),
    Column("full_name", Text, nullable=False),
    Column("avatar_url", Text),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("theme_preference", Text, nullable=False, default="light"),
    Column("created_at", Text, nullable=False),
    Column("updated_at", Text, nullable=False),
)

# --- Indexes ---

Index("ix_actions_restaurant", actions.c.restaurant_id, actions.c.week_start)
Index("ix_image_jobs_restaurant", image_jobs.c.restaurant_id, image_jobs.c.status)
Index("ix_reports_restaurant", reports.c.restaurant_id, reports.c.week_start)
Index("ix_checklist_restaurant", checklist_items.c.restaurant_id, checklist_items.c.week_start)
Index(
    "ix_snapshots_restaurant",
    restaurant_snapshots.c.restaurant_id,
    restaurant_snapshots.c.week_start,
)
Index("ix_tickets_restaurant", tickets.c.restaurant_id, tickets.c.status)
Index("ix_reviews_restaurant", reviews.c.restaurant_id, reviews.c.review_date)
Index(
    "ix_financial_restaurant",
    financial_entries.c.restaurant_id,
    financial_entries.c.reference_date,
)
