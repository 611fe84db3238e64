# Supabase table: user_preferences
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, unique, not null)
- date_format_preference: text ('US' | 'EU' | 'ISO', default 'US')
- visible_subscription_columns: jsonb (default ["service_name", "cost", "billing_cycle", "next_billing_date", "client_name"])
- visible_ltd_columns: jsonb (default ["service_name", "original_cost", "purchase_date", "client_name"])
- default_filters: jsonb (default {})
- dashboard_layout: jsonb (default {})
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
