"""FastAPI request pipeline for the DevHub API."""
