"""
Server-side scripts registered with Cosmos DB.

These are JavaScript bodies handed to the database as data; they run inside
the Cosmos DB engine, not in this process.
"""

# Inserts the items array one document at a time, chaining each insert from
# the previous callback so the script stays within a single transaction.
BULK_INSERT_PROCEDURE = """
function insertItems(items) {
    var context = getContext();
    var collection = context.getCollection();
    var response = context.getResponse();
    var count = 0;

    function tryCreate(item) {
        var isAccepted = collection.createDocument(collection.getSelfLink(), item, function (err, doc) {
            if (err) throw new Error('Error inserting item: ' + err.message);
            count++;
            if (count < items.length) {
                tryCreate(items[count]);
            } else {
                response.setBody('All items were inserted successfully');
            }
        });

        if (!isAccepted) {
            throw new Error('The insert request was not accepted.');
        }
    }

    if (items.length > 0) {
        tryCreate(items[count]);
    } else {
        response.setBody('No items were provided for insertion.');
    }
}
"""
