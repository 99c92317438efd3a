"""Server-side Lua scripts backing the atomic ShortURL operations.

Redis runs each script as one indivisible step: no other command touches
the involved keys until the script returns. This is what makes the
uniqueness constraints and the click update safe across any number of
concurrent lambdas without client-side locks.
"""

# KEYS[1] shortcode index    KEYS[2] owner+url index    KEYS[3] record hash
# ARGV[1] record id          ARGV[2] '1' if the record has an owner
# ARGV[3..] record hash field/value pairs
#
# Returns {status, record id}: status is 'ok', 'shortcode' or 'owner_url'.
CREATE_LINK = """
local existing = redis.call('GET', KEYS[1])
if existing then
    return {'shortcode', existing}
end
if ARGV[2] == '1' then
    existing = redis.call('GET', KEYS[2])
    if existing then
        return {'owner_url', existing}
    end
end
redis.call('SET', KEYS[1], ARGV[1])
if ARGV[2] == '1' then
    redis.call('SET', KEYS[2], ARGV[1])
end
redis.call('HSET', KEYS[3], unpack(ARGV, 3))
return {'ok', ARGV[1]}
"""

# KEYS[1] record hash    KEYS[2] recent clicks list    KEYS[3] day -> clicks hash    KEYS[4] days list
# ARGV[1] click timestamp    ARGV[2] click event JSON    ARGV[3] click day (YYYY-MM-DD)
# ARGV[4] recent clicks limit    ARGV[5] daily stats limit
#
# KEYS[4] stays sorted even when clicks straddling midnight commit out of
# order: a day older than the newest one is inserted before the first later
# day, so LPOP always evicts the oldest day.
#
# Returns {click count, owner id} or nil when the record does not exist.
RECORD_CLICK = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return nil
end
local count = redis.call('HINCRBY', KEYS[1], 'click_count', 1)
redis.call('HSET', KEYS[1], 'last_clicked_at', ARGV[1])
redis.call('RPUSH', KEYS[2], ARGV[2])
redis.call('LTRIM', KEYS[2], -tonumber(ARGV[4]), -1)
if redis.call('HEXISTS', KEYS[3], ARGV[3]) == 1 then
    redis.call('HINCRBY', KEYS[3], ARGV[3], 1)
else
    redis.call('HSET', KEYS[3], ARGV[3], 1)
    local newest = redis.call('LINDEX', KEYS[4], -1)
    if not newest or newest < ARGV[3] then
        redis.call('RPUSH', KEYS[4], ARGV[3])
    else
        local days = redis.call('LRANGE', KEYS[4], 0, -1)
        local later = newest
        for i = #days, 1, -1 do
            if days[i] < ARGV[3] then
                break
            end
            later = days[i]
        end
        redis.call('LINSERT', KEYS[4], 'BEFORE', later, ARGV[3])
    end
    while redis.call('LLEN', KEYS[4]) > tonumber(ARGV[5]) do
        redis.call('HDEL', KEYS[3], redis.call('LPOP', KEYS[4]))
    end
end
return {count, redis.call('HGET', KEYS[1], 'owner_id')}
"""

# KEYS[1] record hash    KEYS[2] owner+url index
# ARGV[1] record id
#
# Returns 1 when the record was deactivated, 0 when it does not exist.
DEACTIVATE_LINK = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return 0
end
redis.call('HSET', KEYS[1], 'is_active', '0')
if redis.call('GET', KEYS[2]) == ARGV[1] then
    redis.call('DEL', KEYS[2])
end
return 1
"""
