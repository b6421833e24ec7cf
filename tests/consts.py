TEST_BUCKET_NAME = "test-voice-clone-uploads"
TEST_QUEUE_NAME = "test-clone-jobs"
TEST_TABLE_NAME = "test-clone-job-status"
TEST_PUBLIC_BASE = "https://bot.example.com"
TEST_REGION = "us-east-1"

TEST_AUDIO_CONTENT = b"RIFF\x24\x00\x00\x00WAVEfmt \x10\x00\x00\x00\x01\x00\x01\x00"
TEST_AUDIO_CONTENT_TYPE = "audio/wav"

UNUSED_JOB_ID = "2f1d9a7e-5c3b-4e8a-9f60-7d4c2b1a0e99"
