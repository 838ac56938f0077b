"""HTTP runner for the upload/subtitle web API (TRANSCRIPT_SRT_HOST / TRANSCRIPT_SRT_PORT)."""
from transcript_srt.web import main

main()
