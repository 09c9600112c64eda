from rest_framework import serializers

TEST_EVENT = "s3:TestEvent"


class S3BucketSerializer(serializers.Serializer):
    name = serializers.CharField(trim_whitespace=True)


class S3ObjectSerializer(serializers.Serializer):
    key = serializers.CharField(trim_whitespace=False)


class S3EntitySerializer(serializers.Serializer):
    bucket = S3BucketSerializer()
    object = S3ObjectSerializer()


class S3RecordSerializer(serializers.Serializer):
    """One entry of an S3 event notification's Records list."""
    s3 = S3EntitySerializer()


class S3NotificationSerializer(serializers.Serializer):
    """
    Message-level shape only. Records are validated one by one so a single bad
    record does not reject its siblings.
    """
    Records = serializers.ListField(child=serializers.JSONField(allow_null=True), allow_empty=False)


class S3TestEventSerializer(serializers.Serializer):
    Service = serializers.CharField()
    Event = serializers.CharField()

    def validate_Event(self, value):
        if value != TEST_EVENT:
            raise serializers.ValidationError(f"Not a test event: {value}")
        return value
