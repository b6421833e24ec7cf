"""Voice Clone API: upload clips, enqueue cloning jobs, poll job status."""
