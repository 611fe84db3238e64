# Supabase table: team_members
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- workspace_owner_id: uuid (foreign key to auth.users.id, not null)
- member_id: uuid (foreign key to auth.users.id, nullable until the invite is accepted)
- member_email: text (not null)
- role: text ('admin' | 'member', default 'member')
- status: text ('pending' | 'active' | 'inactive', default 'pending')
- invited_at: timestamp (default: now())
- accepted_at: timestamp (nullable)
"""
