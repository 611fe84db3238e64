# Supabase table: projects
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id, not null)
- client_id: uuid (foreign key to clients.id, ON DELETE CASCADE, nullable)
- name: text (not null)
- description: text (nullable)
- color_hex: text (default '#3B82F6')
- status: text ('active' | 'inactive' | 'completed', default 'active')
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Reads join clients(name, color_hex).
"""
