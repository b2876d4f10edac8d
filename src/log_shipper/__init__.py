"""Ships gzip-compressed CloudConnexa JSON Lines objects from S3 to Graylog."""
