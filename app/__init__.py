"""
Career Institute Platform API
Backend for the marketing site, the admin back-office and the trainer portal.

Architecture:
- MongoDB: every entity (meetings, reviews, typing sessions, demo slots, interviews, jobs)
- SMTP: meeting invites and demo confirmations
- S3 compatible bucket: review photos and company logos
- OpenAI compatible model: mock interview feedback
"""

__version__ = "1.0.0"
