# Supabase Auth
# Registration, sessions and JWTs are handled by Supabase Auth (auth.users).
# Business profile fields live in public.users; see modules/users/models.py.

"""
Supabase Auth calls used by this module:
- auth.sign_up() - register
- auth.sign_in_with_password() - login
- auth.get_user(jwt) - resolve the bearer token
- auth.sign_out() - logout
- auth.verify_otp({"token_hash", "type"}) - email confirmation links
"""
