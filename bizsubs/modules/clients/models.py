# Supabase table: clients
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- name: text (not null)
- email: text (nullable)
- color_hex: text (default '#6366f1')
- status: text ('active' | 'inactive', default 'active')
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Subscriptions, lifetime deals and projects reference clients.id.
"""
